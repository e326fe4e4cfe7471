from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid request.", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(400, "validation_error", message, details)


class InvalidStatusError(ValidationError):
    def __init__(self, status: Any) -> None:
        super().__init__("Invalid status value.", {"status": status})
        self.code = "invalid_status"


class NotFoundError(AppError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(404, "booking_not_found", "Booking not found.", {"booking_id": booking_id})


class UnresolvedWebhookError(AppError):
    """No booking matched a payment notification by either correlation path."""

    def __init__(self, merchant_order_id: Optional[str], order_id: Any) -> None:
        super().__init__(
            404,
            "webhook_unresolved",
            "Booking not found.",
            {"merchant_order_id": merchant_order_id, "order_id": order_id},
        )


class UpstreamError(AppError):
    """Payment provider call failed.

    `step` and `reason` stay server-side (logs only); every step answers the
    caller with the same code and message.
    """

    step = "provider"

    def __init__(self, reason: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(500, "payment_upstream_error", "Failed to initiate payment.", None)
        self.reason = reason
        self.upstream_status = upstream_status


class UpstreamAuthError(UpstreamError):
    step = "auth"


class UpstreamOrderError(UpstreamError):
    step = "order"


class UpstreamTokenError(UpstreamError):
    step = "payment_key"


class StoreError(AppError):
    def __init__(self, operation: str, reason: str = "") -> None:
        super().__init__(500, "store_error", "Storage operation failed.", None)
        self.operation = operation
        self.reason = reason


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }
