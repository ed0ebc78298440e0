"""Outgoing account email dispatchers."""

from src.infrastructure.email.dispatcher import (
    ConsoleEmailDispatcher,
    HttpEmailDispatcher,
    get_email_dispatcher,
    reset_email_dispatcher,
)

__all__ = [
    "ConsoleEmailDispatcher",
    "HttpEmailDispatcher",
    "get_email_dispatcher",
    "reset_email_dispatcher",
]
