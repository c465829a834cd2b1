"""
Registration OTP endpoints.

- POST /user-registration: Validate payload and mail an activation OTP
- POST /seller-registration: Same for seller accounts (phone number and country required)
- POST /verify-user, /verify-seller: Verify the OTP sent to an email

Creating the account record after a successful verification is left to the
caller. Errors are raised as OtpGateError / InfrastructureError and rendered
by the handlers registered in main.py.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from otp_gate.core.config import settings
from otp_gate.core.deps import get_otp_gate
from otp_gate.core.otp import OtpGate, SELLER_ACTIVATION_TEMPLATE, USER_ACTIVATION_TEMPLATE
from otp_gate.core.validation import validate_registration_data
from otp_gate.schemas.otp import OtpSentResponse, VerificationResponse, VerifyOtpRequest

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


def _register(gate: OtpGate, payload: Dict[str, Any], user_type: str, template: str) -> OtpSentResponse:
    validate_registration_data(payload, user_type)
    email = payload["email"]

    gate.check_restrictions(email)
    gate.request_otp(email, payload["name"], template)

    logger.info(f"Activation OTP sent for {user_type} {email}")

    return OtpSentResponse(
        message="OTP sent to mail successfully, please verify your account",
        expires_in_minutes=max(1, settings.OTP_TTL_SECONDS // 60)
    )


@router.post("/user-registration", response_model=OtpSentResponse)
def user_registration(
    payload: Dict[str, Any] = Body(...),
    gate: OtpGate = Depends(get_otp_gate)
):
    """
    Start user registration by mailing a 4-digit OTP.

    Requires name, email and password.

    Raises:
        400: Missing field or invalid email format
        403: Account locked after too many wrong codes
        429: Cooldown, spam lock, or request limit reached
        503: Store or mail transport unavailable
    """
    return _register(gate, payload, "user", USER_ACTIVATION_TEMPLATE)


@router.post("/seller-registration", response_model=OtpSentResponse)
def seller_registration(
    payload: Dict[str, Any] = Body(...),
    gate: OtpGate = Depends(get_otp_gate)
):
    """
    Start seller registration by mailing a 4-digit OTP.

    Requires name, email, password, phone_number and country.
    """
    return _register(gate, payload, "seller", SELLER_ACTIVATION_TEMPLATE)


def _verify(gate: OtpGate, request: VerifyOtpRequest) -> VerificationResponse:
    gate.verify(request.email, request.otp)
    logger.info(f"Email {request.email} verified by OTP")
    return VerificationResponse(message="Email verified successfully", email=request.email)


@router.post("/verify-user", response_model=VerificationResponse)
def verify_user(
    request: VerifyOtpRequest,
    gate: OtpGate = Depends(get_otp_gate)
):
    """
    Verify the OTP mailed during user registration.

    Raises:
        400: No active OTP, or incorrect OTP (with remaining_attempts)
        403: Account locked
    """
    return _verify(gate, request)


@router.post("/verify-seller", response_model=VerificationResponse)
def verify_seller(
    request: VerifyOtpRequest,
    gate: OtpGate = Depends(get_otp_gate)
):
    """Verify the OTP mailed during seller registration."""
    return _verify(gate, request)
