"""
Unit tests for registration payload validation.
"""

import pytest

from otp_gate.core.exceptions import InvalidEmailFormatError, MissingFieldError
from otp_gate.core.validation import validate_registration_data


class TestValidateRegistrationData:
    """Test required fields and email shape"""

    def test_valid_user(self, user_payload):
        validate_registration_data(user_payload, "user")

    def test_valid_seller(self, seller_payload):
        validate_registration_data(seller_payload, "seller")

    def test_invalid_email(self):
        with pytest.raises(InvalidEmailFormatError):
            validate_registration_data({"name": "a", "email": "bad", "password": "x"}, "user")

    def test_well_formed_equivalent(self):
        validate_registration_data({"name": "a", "email": "a@b.co", "password": "x"}, "user")

    @pytest.mark.parametrize("email", ["a@b", "a b@c.d", "@b.c", "a@.", "a@@b.c"])
    def test_rejected_email_shapes(self, email):
        with pytest.raises(InvalidEmailFormatError):
            validate_registration_data({"name": "a", "email": email, "password": "x"}, "user")

    def test_missing_password(self):
        with pytest.raises(MissingFieldError) as exc_info:
            validate_registration_data({"name": "a", "email": "a@b.co"}, "user")
        assert exc_info.value.fields == ["password"]

    def test_empty_values_count_as_missing(self):
        with pytest.raises(MissingFieldError) as exc_info:
            validate_registration_data({"name": "", "email": "a@b.co", "password": None}, "user")
        assert exc_info.value.fields == ["name", "password"]

    def test_missing_field_checked_before_email(self):
        with pytest.raises(MissingFieldError):
            validate_registration_data({"email": "bad"}, "user")

    def test_seller_needs_phone_and_country(self, user_payload):
        with pytest.raises(MissingFieldError) as exc_info:
            validate_registration_data(user_payload, "seller")
        assert exc_info.value.fields == ["phone_number", "country"]

    def test_user_ignores_seller_fields(self, user_payload):
        validate_registration_data({**user_payload, "country": ""}, "user")

    def test_non_string_email(self):
        with pytest.raises(InvalidEmailFormatError):
            validate_registration_data({"name": "a", "email": 42, "password": "x"}, "user")

    def test_unknown_user_type(self, user_payload):
        with pytest.raises(ValueError):
            validate_registration_data(user_payload, "admin")
