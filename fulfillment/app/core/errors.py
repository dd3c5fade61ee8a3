from __future__ import annotations

from typing import Any, Dict

# What the caller should do about an error
RESUBMIT = "resubmit"
RETRY = "retry"
CONTACT_SUPPORT = "contact_support"


class AppError(Exception):
    default_code = "system_error"
    default_message = "Unexpected error"
    default_http_status = 500
    default_action = CONTACT_SUPPORT

    def __init__(
        self,
        details: str | None = None,
        *,
        code: str | None = None,
        http_status: int | None = None,
        payload: Dict[str, Any] | None = None,
    ) -> None:
        self.code = (code or self.default_code).strip()
        self.http_status = int(http_status or self.default_http_status)
        self.action = self.default_action
        self.details = (details or "").strip() or self.default_message
        self.payload = dict(payload or {})
        super().__init__(self.details)

    def to_response_payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.code,
            "message": self.details,
            "action": self.action,
        }
        if self.payload:
            body.update(self.payload)
        return body


class ValidationError(AppError):
    default_code = "validation_error"
    default_message = "Invalid input"
    default_http_status = 400
    default_action = RESUBMIT


class SupplierNotApproved(ValidationError):
    default_code = "supplier_not_approved"
    default_message = "Supplier is not approved"
    default_http_status = 422


class Unauthenticated(AppError):
    default_code = "unauthenticated"
    default_message = "Missing or invalid actor identity"
    default_http_status = 401
    default_action = RESUBMIT


class Unauthorized(AppError):
    default_code = "unauthorized"
    default_message = "Actor is not allowed to perform this action"
    default_http_status = 403
    default_action = RESUBMIT


class OrderNotFound(AppError):
    default_code = "order_not_found"
    default_message = "Purchase order not found"
    default_http_status = 404
    default_action = RESUBMIT


class InvoiceNotFound(AppError):
    default_code = "invoice_not_found"
    default_message = "Invoice not found"
    default_http_status = 404
    default_action = RESUBMIT


class InvalidTransition(AppError):
    default_code = "invalid_transition"
    default_message = "Requested status change is not allowed"
    default_http_status = 409
    default_action = RESUBMIT


class OrderLocked(AppError):
    default_code = "order_locked"
    default_message = "Order can no longer be edited"
    default_http_status = 409
    default_action = RESUBMIT


class InventoryItemNotFound(AppError):
    default_code = "inventory_item_not_found"
    default_message = "No inventory item for the ordered product"
    default_http_status = 409
    default_action = CONTACT_SUPPORT


class DuplicateCompletion(AppError):
    default_code = "duplicate_completion"
    default_message = "Order completion was already applied"
    default_http_status = 409
    default_action = RETRY
