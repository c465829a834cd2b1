"""
Pydantic schemas for OTP registration and verification endpoints.
"""

from pydantic import BaseModel, Field


class VerifyOtpRequest(BaseModel):
    """Request to verify a 4-digit OTP for an email"""
    email: str = Field(..., min_length=3, description="Email the OTP was sent to")
    otp: str = Field(..., min_length=1, max_length=10, description="4-digit OTP from the email")


class OtpSentResponse(BaseModel):
    """Response after an OTP has been mailed"""
    success: bool = True
    message: str
    expires_in_minutes: int


class VerificationResponse(BaseModel):
    """Response after a successful verification"""
    success: bool = True
    message: str
    email: str
