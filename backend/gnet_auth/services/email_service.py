"""
Transactional email delivery through the Resend HTTP API
"""
import asyncio
import enum
import logging
from typing import Optional

import requests

from ..config import settings
from ..utils.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class DeliveryPolicy(enum.Enum):
    """How a failed send is reported to the caller.

    REQUIRED raises MailDeliveryError. BEST_EFFORT logs the failure and
    returns False.
    """
    REQUIRED = "required"
    BEST_EFFORT = "best_effort"


def _response_body(response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class EmailService:
    """Sends HTML email through Resend"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.from_email = from_email or settings.FROM_EMAIL
        self.timeout = timeout or settings.MAIL_TIMEOUT

    def _post(self, to: str, subject: str, html: str) -> dict:
        if not self.api_key:
            raise MailDeliveryError("RESEND_API_KEY is not configured")

        payload = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise MailDeliveryError(f"Email sending failed: {e}") from e

        if response.status_code >= 400:
            detail = _response_body(response).get("message", response.text)
            raise MailDeliveryError(f"Email sending failed: HTTP {response.status_code} {detail}")

        # A 2xx is an accepted message even when the body is not a JSON object
        return _response_body(response)

    async def deliver(self, to: str, subject: str, html: str) -> dict:
        """Send one email. Raises MailDeliveryError on any failure."""
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, lambda: self._post(to, subject, html))
        logger.info(f"Email sent to {to}: {result.get('id', 'no id')}")
        return result

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        policy: DeliveryPolicy = DeliveryPolicy.REQUIRED,
    ) -> bool:
        """Send an email under the given delivery policy.

        Returns True when the provider accepted the message. A failure raises
        MailDeliveryError under REQUIRED and returns False under BEST_EFFORT.
        """
        try:
            await self.deliver(to, subject, html)
            return True
        except MailDeliveryError as e:
            error = e
        except Exception as e:
            logger.exception(f"Unexpected error sending email to {to}")
            error = MailDeliveryError(f"Email sending failed: {e}")
            error.__cause__ = e

        if policy is DeliveryPolicy.REQUIRED:
            logger.error(f"Required email to {to} failed: {error}")
            raise error
        logger.warning(f"Email to {to} not delivered ({subject}): {error}")
        return False


# Global instance
email_service = EmailService()


def get_email_service() -> EmailService:
    return email_service
