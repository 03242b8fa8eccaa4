"""
Notification feed clients used by the poller.
"""
import asyncio
import logging
from typing import Optional

import requests
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.notification import NotificationFeedResponse
from app.services.visibility import Identity

logger = logging.getLogger(__name__)


class FeedUnavailableError(Exception):
    """A poll could not be completed; the caller keeps its state and retries next tick."""


class HttpNotificationFeed:
    """
    Reads GET /api/notifications over HTTP.

    requests is blocking, so each call runs in a worker thread to keep the
    event loop free.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.notification_poll_timeout_seconds
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/notifications/"

    def fetch_sync(self, last_id: int, identity: Identity) -> NotificationFeedResponse:
        params = {
            "last_id": last_id,
            "role": identity.role or "",
            "user_name": identity.name or "",
        }
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return NotificationFeedResponse.model_validate(resp.json())
        except requests.RequestException as e:
            raise FeedUnavailableError(f"Notification feed request failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise FeedUnavailableError(f"Notification feed returned an invalid body: {e}") from e

    async def fetch(self, last_id: int, identity: Identity) -> NotificationFeedResponse:
        return await asyncio.to_thread(self.fetch_sync, last_id, identity)

    def close(self) -> None:
        self.session.close()
