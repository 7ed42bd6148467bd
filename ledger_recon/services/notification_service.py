"""
Notification service — hands a closing statement to its recipient.

Delivery mechanics live outside this service. The default notifier
only logs the message, which is what development and tests use.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a closing statement."""

    def send(self, recipient: str, subject: str, attachment: Any) -> None:
        """Deliver the attachment or raise NotificationFailed."""
        ...


class LogNotifier:
    """Notifier for development: logs instead of sending."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send(self, recipient: str, subject: str, attachment: Any) -> None:
        logger.info(f"[CLOSING EMAIL] To: {recipient} | Subject: {subject}")
        logger.debug(f"[CLOSING EMAIL] Attachment: {attachment!r:.200}")
        self.sent.append((recipient, subject))
