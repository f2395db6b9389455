"""
Domain exceptions.

Anything raised from the store or a service that the client should see as
a specific HTTP status derives from LuminaError. main.py registers a single
handler that turns these into {"detail": message} responses.
"""

from typing import Any, Optional


class LuminaError(Exception):
    """Base exception for Lumina errors."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.body = body


class NotFoundError(LuminaError):
    """Raised when a record id does not exist in the store."""

    status_code = 404


class ConflictError(LuminaError):
    status_code = 409


class PermissionDeniedError(LuminaError):
    status_code = 403


class PaymentGatewayError(LuminaError):
    """Razorpay rejected the call or could not be reached."""

    status_code = 400


class SMSDeliveryError(LuminaError):
    status_code = 502


class StorageUploadError(LuminaError):
    """Supabase storage rejected the upload or could not be reached."""

    status_code = 502


class UploadLimitError(LuminaError):
    """More files in one upload than the endpoint accepts."""

    status_code = 400
