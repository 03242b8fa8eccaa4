"""
Client-local notification state: cursor, bounded list and the active alert.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from app.schemas.notification import NotificationEventResponse

DEFAULT_MAX_ITEMS = 50


@dataclass
class ClientNotification:
    event: NotificationEventResponse
    is_read: bool = False

    @property
    def id(self) -> int:
        return self.event.id


@dataclass
class ClientNotificationState:
    """
    last_seen_event_id only moves forward. notifications is most-recent-first
    and never holds more than max_items entries.
    """
    max_items: int = DEFAULT_MAX_ITEMS
    last_seen_event_id: int = 0
    notifications: List[ClientNotification] = field(default_factory=list)
    active_alert: Optional[NotificationEventResponse] = None

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    def merge(self, events: Iterable[NotificationEventResponse]) -> List[ClientNotification]:
        """
        Add events newer than the cursor as unread and advance the cursor.

        Returns the added entries, most recent first. Events at or below the
        cursor are dropped, so a replayed response cannot duplicate entries.
        """
        fresh = sorted((e for e in events if e.id > self.last_seen_event_id), key=lambda e: e.id)
        if not fresh:
            return []

        self.last_seen_event_id = fresh[-1].id
        added = [ClientNotification(event) for event in reversed(fresh)]
        self.notifications = (added + self.notifications)[:self.max_items]
        return added

    def mark_all_read(self) -> None:
        for n in self.notifications:
            n.is_read = True

    def clear(self) -> None:
        # The cursor is kept so cleared events never come back
        self.notifications = []
