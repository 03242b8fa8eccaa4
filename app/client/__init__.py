from app.client.feed import FeedUnavailableError, HttpNotificationFeed
from app.client.poller import INTERNAL_VIEWS, NotificationPoller, PollerState
from app.client.state import ClientNotification, ClientNotificationState

__all__ = [
    "FeedUnavailableError",
    "HttpNotificationFeed",
    "INTERNAL_VIEWS",
    "NotificationPoller",
    "PollerState",
    "ClientNotification",
    "ClientNotificationState",
]
