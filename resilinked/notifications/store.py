"""
Notification sinks and the user inbox store.

Delivery is fire-and-forget: a notification that cannot be stored is logged
and dropped, and never fails the job transition that produced it.
"""

import logging
from typing import Iterable, List, Optional, Protocol, Tuple

from resilinked.notifications.models import Notification

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Anything that accepts notifications."""

    def send(self, notification: Notification) -> None:
        ...


class NotificationStore(NotificationSink, Protocol):
    """Persistent per-user inbox."""

    def list_for(
        self,
        recipient: str,
        type: Optional[str] = None,
        is_read: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Notification], int, int]:
        """Return (page, total matching, unread count for the recipient)."""
        ...

    def mark_read(self, notification_id: str, recipient: str) -> Optional[Notification]:
        """Mark one unread notification read. None if missing or already read."""
        ...

    def mark_all_read(self, recipient: str) -> int:
        """Mark every unread notification read. Returns how many changed."""
        ...

    def delete(self, notification_id: str, recipient: str) -> Optional[Notification]:
        """Delete a notification owned by recipient. Returns the deleted one."""
        ...


def dispatch(sink: NotificationSink, effects: Iterable[Notification]) -> int:
    """Send every effect, swallowing and logging individual failures.

    Returns the number of notifications delivered.
    """
    delivered = 0
    for notification in effects:
        try:
            sink.send(notification)
            delivered += 1
        except Exception as e:
            logger.warning(
                f"Notification dropped | type={notification.type} | "
                f"recipient={notification.recipient} | error={e}"
            )
    return delivered


class InMemoryNotificationStore:
    """In-memory notification inbox for testing and local development."""

    def __init__(self):
        self._items: dict[str, Notification] = {}

    @property
    def sent(self) -> List[Notification]:
        """All stored notifications, oldest first."""
        return sorted(self._items.values(), key=lambda n: n.created_at)

    def send(self, notification: Notification) -> None:
        self._items[notification.id] = notification

    def list_for(
        self,
        recipient: str,
        type: Optional[str] = None,
        is_read: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Notification], int, int]:
        mine = [n for n in self._items.values() if n.recipient == recipient]
        unread = sum(1 for n in mine if not n.is_read)

        items = mine
        if type is not None:
            items = [n for n in items if n.type == type]
        if is_read is not None:
            items = [n for n in items if n.is_read == is_read]

        items.sort(key=lambda n: n.created_at, reverse=True)
        return items[offset : offset + limit], len(items), unread

    def mark_read(self, notification_id: str, recipient: str) -> Optional[Notification]:
        n = self._items.get(notification_id)
        if n is None or n.recipient != recipient or n.is_read:
            return None
        n.is_read = True
        return n

    def mark_all_read(self, recipient: str) -> int:
        changed = 0
        for n in self._items.values():
            if n.recipient == recipient and not n.is_read:
                n.is_read = True
                changed += 1
        return changed

    def delete(self, notification_id: str, recipient: str) -> Optional[Notification]:
        n = self._items.get(notification_id)
        if n is None or n.recipient != recipient:
            return None
        return self._items.pop(notification_id)
