import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return {
            Severity.INFO: logging.INFO,
            Severity.SUCCESS: logging.INFO,
            Severity.WARNING: logging.WARNING,
            Severity.ERROR: logging.ERROR,
        }[self]


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    severity: Severity = Severity.INFO
    timestamp: str = field(
        default_factory=lambda: datetime.datetime.now().isoformat(timespec="seconds")
    )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "timestamp": self.timestamp,
        }


class NotificationCenter:
    """Fire-and-forget toast sink.

    Every notification is logged, kept in a bounded history and handed to
    subscribers. Subscriber errors are logged and never reach the caller.
    """

    def __init__(self, history_size: int = 100) -> None:
        self.history_size = history_size
        self.history: List[Notification] = []
        self._subscribers: List[Callable[[Notification], None]] = []

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        self._subscribers.append(callback)

    def notify(
        self,
        title: str,
        description: str = "",
        severity: Severity = Severity.INFO,
    ) -> Notification:
        note = Notification(title, description, Severity(severity))
        logger.log(note.severity.log_level, "%s: %s", title, description)
        self.history.append(note)
        del self.history[: -self.history_size]
        for callback in list(self._subscribers):
            try:
                callback(note)
            except Exception:
                logger.exception("notification subscriber failed")
        return note

    def clear(self) -> None:
        self.history.clear()
