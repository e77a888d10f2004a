"""User-visible diagnostics.

Messages always go to the standard logger. Hosts with their own message feed
(an in-game ticker, a status bar) pass a callback that receives the same text
and a ``MessageLevel``. Callbacks run on whichever thread raised the message,
including background cycle threads.
"""

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class MessageLevel(str, Enum):
    SILENT = "silent"  # debug statistics
    CAUTION = "caution"  # lifecycle notices
    REJECT = "reject"  # delivery failures


_LOG_LEVELS = {
    MessageLevel.SILENT: logging.DEBUG,
    MessageLevel.CAUTION: logging.INFO,
    MessageLevel.REJECT: logging.WARNING,
}

MessageCallback = Callable[[str, MessageLevel], None]


class Notifier:
    """Fan diagnostics out to the log and an optional host callback."""

    def __init__(self, callback: Optional[MessageCallback] = None) -> None:
        self.callback = callback

    def message(self, text: str, level: MessageLevel = MessageLevel.CAUTION) -> None:
        logger.log(_LOG_LEVELS[level], text)
        if self.callback is None:
            return
        try:
            self.callback(text, level)
        except Exception as e:
            # A broken host feed must not take down a cycle
            logger.error("Message callback failed: %s", e, exc_info=True)

    def silent(self, text: str) -> None:
        self.message(text, MessageLevel.SILENT)

    def caution(self, text: str) -> None:
        self.message(text, MessageLevel.CAUTION)

    def reject(self, text: str) -> None:
        self.message(text, MessageLevel.REJECT)
