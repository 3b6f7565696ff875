"""
Outbound mail through the Mailgun HTTP API.
Credentials come only from settings; sending never raises into the caller.
"""

from typing import Optional
import httpx
import logging

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class MailService:
    """Sends plain-text mail. Returns False instead of raising when delivery fails."""

    def __init__(self, config: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or get_settings()
        self._client = client

    @property
    def from_address(self) -> str:
        return f"{self.config.mail_from_name} <{self.config.mail_from_email}>"

    @property
    def messages_url(self) -> str:
        base = self.config.mailgun_base_url.strip().rstrip("/")
        domain = self.config.mailgun_domain.strip().lower()
        return f"{base}/v3/{domain}/messages"

    async def _post(self, client: httpx.AsyncClient, data: dict) -> httpx.Response:
        return await client.post(
            self.messages_url,
            auth=("api", self.config.mailgun_api_key),
            data=data,
        )

    async def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send one message.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain-text body

        Returns:
            True if Mailgun accepted the message
        """
        if not self.config.mail_configured:
            logger.warning(f"Mail not sent to {to} ({subject}): MAILGUN_API_KEY and MAILGUN_DOMAIN must both be set")
            return False

        data = {
            "from": self.from_address,
            "to": to,
            "subject": subject,
            "text": body,
        }

        try:
            if self._client is not None:
                response = await self._post(self._client, data)
            else:
                async with httpx.AsyncClient(timeout=self.config.mail_timeout_seconds) as client:
                    response = await self._post(client, data)
        except httpx.HTTPError as e:
            logger.error(f"Mail to {to} failed: {e}", exc_info=True)
            return False

        if response.is_success:
            logger.info(f"Mail sent to {to}: {subject}")
            return True

        logger.warning(f"Mailgun rejected mail to {to}: status={response.status_code} body={response.text}")
        return False
