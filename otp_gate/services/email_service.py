"""
AWS SES Email Service for sending OTP emails.

Handles template rendering and AWS SES integration.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from otp_gate.core.config import settings

logger = logging.getLogger(__name__)


def _build_activation_html(data: Mapping[str, Any], audience: str) -> str:
    """
    Build HTML email body for an account activation code.

    Args:
        data: Template data with "name" and "otp"
        audience: Short description of the account type (e.g. "account", "seller account")

    Returns:
        str: HTML email content
    """
    name = data.get("name")
    greeting = f"Hi {name}," if name else "Hi there,"
    expires_minutes = max(1, settings.OTP_TTL_SECONDS // 60)

    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Verify Your Email</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
    <table role="presentation" style="width: 100%; border-collapse: collapse;">
        <tr>
            <td align="center" style="padding: 40px 0;">
                <table role="presentation" style="width: 600px; border-collapse: collapse; background-color: #ffffff; border-radius: 8px;">
                    <tr>
                        <td style="padding: 40px 40px 20px 40px; text-align: center;">
                            <h1 style="margin: 0; color: #333333; font-size: 28px; font-weight: 600;">
                                Activate Your {audience.title()}
                            </h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 0 40px 40px 40px;">
                            <p style="margin: 0 0 20px 0; color: #666666; font-size: 16px; line-height: 1.5;">
                                {greeting}
                            </p>
                            <p style="margin: 0 0 30px 0; color: #666666; font-size: 16px; line-height: 1.5;">
                                Use the one-time code below to activate your {audience} on {settings.APP_NAME}:
                            </p>
                            <div style="background-color: #f8f9fa; border-radius: 8px; padding: 30px; text-align: center; margin: 0 0 30px 0;">
                                <div style="font-size: 36px; font-weight: 700; letter-spacing: 8px; color: #4F46E5; font-family: 'Courier New', monospace;">
                                    {data["otp"]}
                                </div>
                            </div>
                            <p style="margin: 0 0 20px 0; color: #666666; font-size: 14px; line-height: 1.5;">
                                This code will expire in <strong>{expires_minutes} minutes</strong>.
                            </p>
                            <p style="margin: 0; color: #999999; font-size: 13px; line-height: 1.5;">
                                If you didn't request this code, you can safely ignore this email.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""


def _build_activation_text(data: Mapping[str, Any], audience: str) -> str:
    """Plain text fallback for the activation email."""
    name = data.get("name")
    greeting = f"Hi {name}," if name else "Hi there,"
    expires_minutes = max(1, settings.OTP_TTL_SECONDS // 60)

    return f"""{greeting}

Use the one-time code below to activate your {audience} on {settings.APP_NAME}:

{data["otp"]}

This code will expire in {expires_minutes} minutes.

If you didn't request this code, you can safely ignore this email.

---
{settings.APP_NAME}
"""


TemplateBuilder = Callable[[Mapping[str, Any]], str]

# template id -> (html builder, text builder)
TEMPLATES: Dict[str, Tuple[TemplateBuilder, TemplateBuilder]] = {
    "user-activation-mail": (
        lambda data: _build_activation_html(data, "account"),
        lambda data: _build_activation_text(data, "account"),
    ),
    "seller-activation-mail": (
        lambda data: _build_activation_html(data, "seller account"),
        lambda data: _build_activation_text(data, "seller account"),
    ),
}


def render_template(template_id: str, template_data: Mapping[str, Any]) -> Tuple[str, str]:
    """
    Render a registered template.

    Returns:
        Tuple[str, str]: (html_body, text_body)

    Raises:
        ValueError: If the template id is not registered
    """
    try:
        html_builder, text_builder = TEMPLATES[template_id]
    except KeyError:
        raise ValueError(f"Unknown email template: {template_id}")
    return html_builder(template_data), text_builder(template_data)


class EmailService:
    """
    Service for sending templated emails via AWS SES.
    """

    def __init__(self, ses_client: Optional[Any] = None):
        """Initialize AWS SES client"""
        if ses_client is not None:
            self.ses_client = ses_client
            return

        session_kwargs = {
            'region_name': settings.AWS_REGION,
        }

        # Add credentials if provided (otherwise uses IAM role)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            session_kwargs['aws_access_key_id'] = settings.AWS_ACCESS_KEY_ID
            session_kwargs['aws_secret_access_key'] = settings.AWS_SECRET_ACCESS_KEY

        self.ses_client = boto3.client('ses', **session_kwargs)

    def send_email(
        self,
        to_email: str,
        subject: str,
        template_id: str,
        template_data: Mapping[str, Any]
    ) -> bool:
        """
        Render a template and send it to a single recipient.

        Args:
            to_email: Recipient email address
            subject: Email subject line
            template_id: Registered template id (e.g. "user-activation-mail")
            template_data: Template variables, at minimum {"name", "otp"}

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        html_body, text_body = render_template(template_id, template_data)

        try:
            response = self.ses_client.send_email(
                Source=f"{settings.AWS_SES_FROM_NAME} <{settings.AWS_SES_FROM_EMAIL}>",
                Destination={'ToAddresses': [to_email]},
                Message={
                    'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                    'Body': {
                        'Html': {'Data': html_body, 'Charset': 'UTF-8'},
                        'Text': {'Data': text_body, 'Charset': 'UTF-8'}
                    }
                }
            )

            message_id = response.get('MessageId')
            logger.info(f"Email '{template_id}' sent to {to_email} (MessageId: {message_id})")
            return True

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"AWS SES ClientError: {error_code} - {error_message}")

            if error_code == 'MessageRejected':
                logger.error(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                logger.error("Sender email not verified in SES")

            return False

        except BotoCoreError as e:
            logger.error(f"AWS BotoCoreError: {str(e)}")
            return False


# Singleton instance
email_service = EmailService()
