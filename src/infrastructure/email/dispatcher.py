"""
Account email dispatchers.

``console`` logs the link instead of sending (development); ``http`` posts
the message to a transactional email API (Resend-style JSON payload).
"""

import httpx

from src.config import get_logger, get_settings
from src.core.exceptions import ConfigurationError, EmailDeliveryError
from src.core.interfaces.email import EmailDispatchResult, IEmailDispatcher

logger = get_logger(__name__)


def verification_link(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/verify-email/{token}"


def reset_link(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/reset-password/{token}"


class ConsoleEmailDispatcher(IEmailDispatcher):
    """Logs links instead of delivering them."""

    def __init__(self, frontend_url: str):
        self.frontend_url = frontend_url

    async def send_verification(self, recipient: str, token: str) -> EmailDispatchResult:
        link = verification_link(self.frontend_url, token)
        logger.info("email_not_sent_dev_mode", kind="verification", recipient=recipient, link=link)
        return EmailDispatchResult(dev_mode=True, link=link)

    async def send_password_reset(self, recipient: str, token: str) -> EmailDispatchResult:
        link = reset_link(self.frontend_url, token)
        logger.info("email_not_sent_dev_mode", kind="password_reset", recipient=recipient, link=link)
        return EmailDispatchResult(dev_mode=True, link=link)


class HttpEmailDispatcher(IEmailDispatcher):
    """Sends email through an HTTP API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        frontend_url: str,
        timeout: float = 15.0,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.frontend_url = frontend_url
        self.timeout = timeout

    async def send_verification(self, recipient: str, token: str) -> EmailDispatchResult:
        link = verification_link(self.frontend_url, token)
        await self._send(
            recipient,
            subject="Confirm your email",
            text=f"Confirm your account by opening this link (valid for 24 hours):\n{link}",
        )
        return EmailDispatchResult(dev_mode=False)

    async def send_password_reset(self, recipient: str, token: str) -> EmailDispatchResult:
        link = reset_link(self.frontend_url, token)
        await self._send(
            recipient,
            subject="Reset your password",
            text=f"Reset your password by opening this link (valid for 10 minutes):\n{link}",
        )
        return EmailDispatchResult(dev_mode=False)

    async def _send(self, recipient: str, subject: str, text: str) -> None:
        payload = {
            "from": self.sender,
            "to": [recipient],
            "subject": subject,
            "text": text,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "email_http_error",
                recipient=recipient,
                status=e.response.status_code,
            )
            raise EmailDeliveryError(recipient, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("email_network_error", recipient=recipient, error=str(e))
            raise EmailDeliveryError(recipient, str(e)) from e

        logger.info("email_sent", recipient=recipient, subject=subject)


_dispatcher: IEmailDispatcher | None = None


def get_email_dispatcher() -> IEmailDispatcher:
    """Get the configured dispatcher (singleton)."""
    global _dispatcher
    if _dispatcher is None:
        settings = get_settings().email
        if settings.provider == "http":
            if not settings.api_key:
                raise ConfigurationError("EMAIL_API_KEY is required for the http email provider")
            _dispatcher = HttpEmailDispatcher(
                api_url=settings.api_url,
                api_key=settings.api_key,
                sender=settings.sender,
                frontend_url=settings.frontend_url,
                timeout=settings.timeout,
            )
        else:
            _dispatcher = ConsoleEmailDispatcher(settings.frontend_url)
    return _dispatcher


def reset_email_dispatcher() -> None:
    """Reset dispatcher (for testing)."""
    global _dispatcher
    _dispatcher = None
