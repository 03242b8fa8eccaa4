from datetime import datetime

from app.client.feed import FeedUnavailableError
from app.models.notification import NotificationType
from app.schemas.notification import NotificationEventResponse, NotificationFeedResponse
from app.schemas.visitor import VisitorCheckIn


def check_in(full_name="Jane Doe", host_name="Alice", **extra) -> VisitorCheckIn:
    return VisitorCheckIn(full_name=full_name, host_name=host_name, company="Acme", purpose="Meeting", **extra)


def make_event(event_id, event_type=NotificationType.NEW_VISITOR, visitor_name="Jane Doe", host_name="Alice"):
    return NotificationEventResponse(
        id=event_id,
        visitor_id=f"v{event_id}",
        type=event_type,
        message=f"event {event_id}",
        created_at=datetime(2026, 1, 1, 9, 0, 0),
        visitor_name=visitor_name,
        host_name=host_name,
    )


class FakeFeed:
    """In-process feed: serves events after the cursor, can fail or hold requests open."""

    def __init__(self):
        self.events = []
        self.calls = []
        self.fail = False
        self.gate = None

    def add(self, *event_ids, **kwargs):
        for event_id in event_ids:
            self.events.append(make_event(event_id, **kwargs))

    async def fetch(self, last_id, identity):
        self.calls.append(last_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise FeedUnavailableError("feed down")
        new = [e for e in self.events if e.id > last_id]
        return NotificationFeedResponse(
            notifications=new,
            has_new=bool(new),
            latest_id=new[-1].id if new else last_id,
        )
