"""Email service - Appointment emails sent through Resend."""

import asyncio
import logging
from typing import Callable

import logfire
import resend

from vetcare.config import settings
from vetcare.exceptions import EmailDeliveryError
from vetcare.email_templates import (
    appointment_cancelled_template,
    appointment_confirmed_template,
    appointment_requested_template,
    appointment_rescheduled_template,
)

logger = logging.getLogger(__name__)

TEMPLATES: dict[str, Callable[[dict], str]] = {
    "appointment-requested": appointment_requested_template,
    "appointment-confirmation": appointment_confirmed_template,
    "appointment-rescheduled": appointment_rescheduled_template,
    "appointment-cancelled": appointment_cancelled_template,
}


class EmailService:
    """Renders a named template and hands it to Resend.

    Without an API key the message is only logged, which keeps local
    development and tests free of network calls.
    """

    def __init__(self, api_key: str | None = None, from_address: str | None = None):
        self.api_key = settings.resend_api_key if api_key is None else api_key
        self.from_address = from_address or settings.email_from

    async def send(self, template: str, data: dict, to: str | list[str] | None, subject: str) -> bool:
        """Send one email; raises ``EmailDeliveryError`` when delivery fails."""
        render = TEMPLATES.get(template)
        if render is None:
            raise EmailDeliveryError(f"Unknown email template: {template}")

        if to is None:
            recipients = []
        else:
            recipients = [to] if isinstance(to, str) else list(to)
        if not recipients or not all(recipients):
            raise EmailDeliveryError("Email recipient missing.")

        html = render(data)

        if not self.api_key:
            logger.info("Email (not sent, no API key) to=%s subject=%s", recipients, subject)
            return True

        payload = {
            "from": self.from_address,
            "to": recipients,
            "subject": subject,
            "html": html,
        }
        try:
            resend.api_key = self.api_key
            response = await asyncio.to_thread(resend.Emails.send, payload)
        except Exception as e:
            logfire.error("email_send_error", template=template, to=recipients, error=str(e))
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        logfire.info("email_sent", template=template, to=recipients, response=str(response))
        return True
