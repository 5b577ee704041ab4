# ============================================================================
# app/services/sms/sms_service.py
# ============================================================================
"""Outbound SMS via Twilio"""
import logging
from typing import Optional

from twilio.rest import Client

from app.config.settings import get_settings

logger = logging.getLogger(__name__)


class SMSService:
    """Handles SMS sending operations"""

    def __init__(self, client: Optional[Client] = None):
        settings = get_settings()
        self.from_number = settings.TWILIO_FROM_NUMBER
        if client is not None:
            self.client = client
        elif settings.TWILIO_ACCOUNT_SID:
            self.client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        else:
            self.client = None

    def send_sms(self, to_phone: str, message_body: str) -> str:
        """Send one SMS and return the Twilio message SID. Twilio errors propagate."""
        if not self.client or not self.from_number:
            raise RuntimeError("Twilio is not configured (TWILIO_ACCOUNT_SID / TWILIO_FROM_NUMBER)")

        message = self.client.messages.create(
            to=to_phone,
            from_=self.from_number,
            body=message_body
        )
        logger.info(f"SMS sent to {to_phone}: {message.sid}")
        return message.sid
