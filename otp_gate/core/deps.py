"""
FastAPI dependencies for the OTP gate.

Tests override get_store / get_email_service via app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from otp_gate.core.config import settings
from otp_gate.core.otp import OtpGate
from otp_gate.core.store import KeyValueStore, create_store
from otp_gate.services.email_service import EmailService, email_service


@lru_cache
def get_store() -> KeyValueStore:
    """Process-wide store (one Redis connection pool per worker)"""
    return create_store(settings)


def get_email_service() -> EmailService:
    return email_service


def get_otp_gate(
    store: KeyValueStore = Depends(get_store),
    mailer: EmailService = Depends(get_email_service)
) -> OtpGate:
    return OtpGate(store, mailer)
