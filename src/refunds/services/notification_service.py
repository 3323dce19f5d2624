"""Refund confirmation emails sent through Amazon SES."""

import logging
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from refunds.config import get_settings
from refunds.models.errors import NotificationError
from refunds.models.refund import RefundNotification

logger = logging.getLogger(__name__)

SUBJECT = "Your Midas The Lifestyle refund confirmation"


class NotificationService:
    """Sends luxury-branded refund confirmations to customers."""

    def __init__(self, from_email: str | None = None, region_name: str | None = None) -> None:
        settings = get_settings()
        self._from_email = from_email or settings.ses_from_email
        self._client = boto3.client("ses", region_name=region_name or settings.ses_region)

    def send_refund_confirmation(self, notification: RefundNotification) -> str:
        """Email a refund confirmation to the customer.

        Args:
            notification: Refund details for the confirmation

        Returns:
            SES message ID

        Raises:
            NotificationError: If the email cannot be sent
        """
        if not self._from_email:
            raise NotificationError("SES_FROM_EMAIL is not configured")

        text_body, html_body = self.render(notification)

        try:
            response = self._client.send_email(
                Source=self._from_email,
                Destination={"ToAddresses": [notification.customer_email]},
                Message={
                    "Subject": {"Data": SUBJECT, "Charset": "UTF-8"},
                    "Body": {
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise NotificationError(f"Failed to send refund confirmation: {e}") from e

        message_id = response["MessageId"]
        logger.info("Refund confirmation sent for %s: %s", notification.refund_id, message_id)
        return message_id

    @staticmethod
    def render(notification: RefundNotification) -> tuple[str, str]:
        """Render the plain text and HTML bodies of a confirmation."""
        item = notification.item_name or "your booking"
        refund = f"{notification.refund_amount:.2f} {notification.currency}"
        original = f"{notification.original_amount:.2f} {notification.currency}"
        calculation = notification.refund_calculation

        text_body = f"""
Refund confirmation - booking {notification.booking_id}

Your cancellation of {item} has been processed.

Original amount: {original}
Refund amount: {refund}
Policy applied: {calculation.reason}

Refunds typically arrive within {notification.processing_time_estimate}.

{notification.message}
"""

        html_body = f"""
    <html>
    <body style="font-family: Georgia, serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #b8860b;">Refund confirmation</h2>
        <p>Your cancellation of <strong>{item}</strong>
           (booking {notification.booking_id}) has been processed.</p>
        <table style="font-size: 15px;">
            <tr><td>Original amount</td><td>{original}</td></tr>
            <tr><td>Refund amount</td><td><strong>{refund}</strong></td></tr>
            <tr><td>Policy applied</td><td>{calculation.reason}</td></tr>
        </table>
        <p style="color: #666; font-size: 14px;">
            Refunds typically arrive within {notification.processing_time_estimate}.
        </p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
        <p style="color: #999; font-size: 12px;">{notification.message}</p>
    </body>
    </html>
    """
        return text_body, html_body


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Get the shared NotificationService instance."""
    return NotificationService()
