"""Abstract interface for outgoing account emails."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmailDispatchResult:
    """Outcome of a dispatched email.

    ``dev_mode`` is True when nothing was actually delivered and the link
    was only logged; ``link`` is then safe to hand back to the caller.
    """

    dev_mode: bool
    link: str | None = None


class IEmailDispatcher(ABC):
    """Sends verification and password-reset emails."""

    @abstractmethod
    async def send_verification(self, recipient: str, token: str) -> EmailDispatchResult:
        """Send the email-verification link."""
        pass

    @abstractmethod
    async def send_password_reset(self, recipient: str, token: str) -> EmailDispatchResult:
        """Send the password-reset link."""
        pass
