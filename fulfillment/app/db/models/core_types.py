import enum
from decimal import Decimal


class ActorRole(str, enum.Enum):
    supplier = "Supplier"
    admin = "Admin"


class POStatus(str, enum.Enum):
    pending = "Pending"
    accepted = "Accepted"
    dispatched = "Dispatched"
    delivered = "Delivered"
    completed = "Completed"
    rejected = "Rejected"


TERMINAL_PO_STATUSES = frozenset({POStatus.completed, POStatus.rejected})


class SupplierStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class InvoiceStatus(str, enum.Enum):
    pending = "Pending"
    paid = "Paid"


class StockStatus(str, enum.Enum):
    in_stock = "In Stock"
    low_stock = "Low Stock"
    out_of_stock = "Out of Stock"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values ("Completed") rather than member names ("completed")."""
    return [member.value for member in enum_cls]


# Order term bounds. Every accepted order must still fit its invoice:
# invoices.amount is Numeric(14, 2), purchase_orders.price_per_unit Numeric(12, 2)
MAX_PO_QUANTITY = 1_000_000
MAX_UNIT_PRICE = Decimal("9999999999.99")
MAX_ORDER_TOTAL = Decimal("999999999999.99")
