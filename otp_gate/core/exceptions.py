"""
Error taxonomy for the OTP gate.

OtpGateError subclasses are expected, user-facing outcomes (a locked account,
a wrong code, a malformed request). InfrastructureError subclasses are
unexpected failures of a collaborator (Redis, mail transport) that a caller can
retry or report as a 5xx condition.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import status


class OtpGateError(Exception):
    """Base class for expected OTP gate outcomes."""

    error_code = "otp_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "OTP request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.error_code, "message": self.message}


class AccountLockedError(OtpGateError):
    error_code = "account_locked"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is locked. Please try again in 30 minutes."


class SpamLockedError(OtpGateError):
    error_code = "spam_locked"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many OTP requests! Please wait 1 hour before retry."


class CooldownError(OtpGateError):
    error_code = "cooldown"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Please wait 1 minute before requesting another OTP."


class TooManyRequestsError(OtpGateError):
    error_code = "too_many_requests"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many OTP requests! Please try again later after 1 hour."


class ExpiredOrInvalidOtpError(OtpGateError):
    error_code = "otp_expired_or_invalid"
    default_message = "Invalid OTP or expired!"


class IncorrectOtpError(OtpGateError):
    error_code = "incorrect_otp"

    def __init__(self, remaining_attempts: int):
        self.remaining_attempts = remaining_attempts
        noun = "attempt" if remaining_attempts == 1 else "attempts"
        super().__init__(f"Incorrect OTP. You have {remaining_attempts} {noun} left.")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["remaining_attempts"] = self.remaining_attempts
        return data


class MissingFieldError(OtpGateError):
    error_code = "missing_field"
    default_message = "All fields are required"

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class InvalidEmailFormatError(OtpGateError):
    error_code = "invalid_email_format"
    default_message = "Invalid email format"


class InfrastructureError(Exception):
    """Base class for collaborator failures (store, mail transport)."""

    error_code = "infrastructure_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_message = "Service temporarily unavailable. Please try again later."


class StoreError(InfrastructureError):
    """The key-value store could not be reached or rejected a command."""

    error_code = "store_unavailable"


class EmailDeliveryError(InfrastructureError):
    """The OTP mail could not be handed to the mail transport."""

    error_code = "email_delivery_failed"
    public_message = "Could not send the OTP email. Please try again later."
