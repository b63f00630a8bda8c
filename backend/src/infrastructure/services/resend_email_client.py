"""
Resend Email Client
Transactional email delivery for digests
"""
from typing import Optional

import httpx

from application.services.notification import IEmailClient
from core.config import settings
from core.exceptions import CollaboratorUnavailableException
from core.logging_config import logger


class ResendEmailClient(IEmailClient):
    """Sends HTML email through the Resend HTTP API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout_seconds: float = 15.0,
    ):
        self.api_key = api_key or settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.from_email = from_email or settings.RESEND_FROM_EMAIL
        self.timeout = httpx.Timeout(timeout_seconds)

    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        """
        Send one email

        Returns:
            Provider message ID, when the API returns one

        Raises:
            CollaboratorUnavailableException: not configured or delivery failed
        """
        if not self.api_key:
            raise CollaboratorUnavailableException("email", "RESEND_API_KEY not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": self.from_email,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CollaboratorUnavailableException(
                "email", f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise CollaboratorUnavailableException("email", f"{type(e).__name__}: {e}") from e

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.debug(f"Email '{subject}' accepted by Resend (id={message_id})")
        return message_id
