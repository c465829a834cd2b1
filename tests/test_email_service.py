"""
Unit tests for the SES email service.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from otp_gate.services.email_service import EmailService, render_template


@pytest.fixture
def ses_client():
    client = MagicMock()
    client.send_email.return_value = {"MessageId": "msg-123"}
    return client


class TestRenderTemplate:
    """Test template rendering"""

    def test_user_activation(self):
        html, text = render_template("user-activation-mail", {"name": "Ada", "otp": "4821"})

        assert "4821" in html
        assert "Hi Ada," in html
        assert "4821" in text
        assert "5 minutes" in text

    def test_seller_activation(self):
        html, _ = render_template("seller-activation-mail", {"name": "Grace", "otp": "1234"})
        assert "seller account" in html

    def test_missing_name(self):
        _, text = render_template("user-activation-mail", {"otp": "1234"})
        assert text.startswith("Hi there,")

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            render_template("password-reset-mail", {"otp": "1234"})


class TestEmailService:
    """Test sending through a mocked SES client"""

    def test_send_success(self, ses_client):
        service = EmailService(ses_client=ses_client)

        sent = service.send_email("ada@example.com", "Verify Your Email", "user-activation-mail", {"name": "Ada", "otp": "4821"})

        assert sent is True
        kwargs = ses_client.send_email.call_args.kwargs
        assert kwargs["Destination"] == {"ToAddresses": ["ada@example.com"]}
        assert kwargs["Message"]["Subject"]["Data"] == "Verify Your Email"
        assert "4821" in kwargs["Message"]["Body"]["Html"]["Data"]

    def test_client_error_returns_false(self, ses_client):
        ses_client.send_email.side_effect = ClientError(
            {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}},
            "SendEmail"
        )
        service = EmailService(ses_client=ses_client)

        assert service.send_email("ada@example.com", "Verify Your Email", "user-activation-mail", {"otp": "1"}) is False

    def test_connection_error_returns_false(self, ses_client):
        ses_client.send_email.side_effect = EndpointConnectionError(endpoint_url="https://email.us-east-1.amazonaws.com")
        service = EmailService(ses_client=ses_client)

        assert service.send_email("ada@example.com", "Verify Your Email", "user-activation-mail", {"otp": "1"}) is False
