from __future__ import annotations

from datetime import date

from fulfillment.app.db.models.core_types import InvoiceStatus
from fulfillment.app.schemas.common import APIModel, Money


class InvoiceRead(APIModel):
    id: int
    invoice_number: str
    order_id: int
    supplier_id: int
    amount: Money
    status: InvoiceStatus
    issue_date: date
    due_date: date
    payment_date: date | None = None
