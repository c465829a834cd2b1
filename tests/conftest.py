"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- A controllable clock and an in-memory store bound to it
- A recording email service (no SES calls)
- The OTP gate and a FastAPI test client wired to them
"""

import pytest
from fastapi.testclient import TestClient

from otp_gate.core.config import Settings
from otp_gate.core.deps import get_otp_gate, get_store
from otp_gate.core.otp import OtpGate
from otp_gate.core.store import MemoryStore
from main import app


class FakeClock:
    """Manually advanced clock, in seconds"""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEmailService:
    """Records sent emails instead of calling SES"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_email(self, to_email, subject, template_id, template_data):
        if self.fail:
            return False
        self.sent.append({
            "to": to_email,
            "subject": subject,
            "template_id": template_id,
            "template_data": dict(template_data),
        })
        return True

    @property
    def last_otp(self) -> str:
        return self.sent[-1]["template_data"]["otp"]


@pytest.fixture
def otp_settings():
    """Default settings, ignoring any local .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def mailer():
    return FakeEmailService()


@pytest.fixture
def gate(store, mailer, otp_settings):
    return OtpGate(store, mailer, otp_settings)


@pytest.fixture
def client(store, mailer, otp_settings):
    """
    FastAPI test client with the store and mailer overridden.
    """
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_otp_gate] = lambda: OtpGate(store, mailer, otp_settings)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    """Sample user registration payload"""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "SecurePass123!"
    }


@pytest.fixture
def seller_payload():
    """Sample seller registration payload"""
    return {
        "name": "Grace Hopper",
        "email": "grace@shop.example.com",
        "password": "SecurePass123!",
        "phone_number": "+15551234567",
        "country": "US"
    }
