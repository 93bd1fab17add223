"""
Bounded alert log.

Newest-first history of raised signals, capped at a fixed number of entries.
Dismissed entries stay visible until the next alert is added.
"""

import logging
import uuid
from collections.abc import Callable

from goldtrackr.config.constants import ALERT_LOG_CAPACITY
from goldtrackr.core.types import AlertCategory, AlertItem
from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


def _default_alert_id(timestamp_ms: int) -> str:
    return f"{timestamp_ms}-{uuid.uuid4().hex[:8]}"


class AlertLog:
    """
    In-memory alert history.

    Adding an alert drops dismissed entries and the oldest active ones so
    that, including the new one, at most `capacity` entries are tracked.
    """

    def __init__(
        self,
        capacity: int = ALERT_LOG_CAPACITY,
        clock: Callable[[], int] = get_timestamp_ms,
        id_factory: Callable[[int], str] = _default_alert_id,
    ) -> None:
        """
        Initialize alert log.

        Args:
            capacity: Maximum number of tracked entries.
            clock: Epoch-ms time source.
            id_factory: Builds a unique id from the creation timestamp.
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._clock = clock
        self._id_factory = id_factory
        self._entries: list[AlertItem] = []

    def add(
        self,
        message: str,
        category: AlertCategory = AlertCategory.INFO,
        spread: float | None = None,
    ) -> AlertItem:
        """
        Record a new alert at the head of the log.

        Args:
            message: Alert text.
            category: Alert category.
            spread: Optional spread magnitude that triggered the alert.

        Returns:
            The created alert.
        """
        timestamp = self._clock()
        alert = AlertItem(
            id=self._id_factory(timestamp),
            message=message,
            category=category,
            timestamp=timestamp,
            spread=spread,
        )

        kept = [entry for entry in self._entries if not entry.dismissed][: self._capacity - 1]

        evicted = len(self._entries) - len(kept)
        if evicted:
            logger.debug(f"Evicted {evicted} oldest alert(s)")

        self._entries = [alert, *kept]
        return alert

    def dismiss(self, alert_id: str) -> bool:
        """
        Mark an alert dismissed.

        Returns:
            True if a matching alert was found.
        """
        for entry in self._entries:
            if entry.id == alert_id:
                entry.dismissed = True
                return True
        return False

    def clear(self) -> None:
        """Remove every entry, dismissed ones included."""
        self._entries.clear()

    def get(self, alert_id: str) -> AlertItem | None:
        """Look up an alert by id."""
        for entry in self._entries:
            if entry.id == alert_id:
                return entry
        return None

    @property
    def active(self) -> list[AlertItem]:
        """Non-dismissed alerts, newest first."""
        return [entry for entry in self._entries if not entry.dismissed]

    @property
    def all(self) -> list[AlertItem]:
        """Every tracked alert, newest first."""
        return list(self._entries)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)
