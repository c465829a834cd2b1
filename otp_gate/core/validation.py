"""
Shape validation for registration payloads.
"""

import re
from typing import Any, Mapping

from otp_gate.core.exceptions import InvalidEmailFormatError, MissingFieldError

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

REQUIRED_FIELDS = {
    "user": ("name", "email", "password"),
    "seller": ("name", "email", "password", "phone_number", "country"),
}


def validate_registration_data(data: Mapping[str, Any], user_type: str) -> None:
    """
    Validate a raw registration payload.

    Args:
        data: Untyped request body
        user_type: "user" or "seller" (sellers also need phone_number and country)

    Raises:
        MissingFieldError: A required field is absent or empty
        InvalidEmailFormatError: Email is not shaped like local@domain.tld
    """
    if user_type not in REQUIRED_FIELDS:
        raise ValueError(f"Unknown user type: {user_type}")

    missing = [field for field in REQUIRED_FIELDS[user_type] if not data.get(field)]
    if missing:
        raise MissingFieldError(missing)

    if not isinstance(data["email"], str) or not EMAIL_REGEX.match(data["email"]):
        raise InvalidEmailFormatError()
