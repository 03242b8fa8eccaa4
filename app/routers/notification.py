"""
Notification Router
Cursor-based polling feed for reception, host and admin views.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.database import get_db
from app.schemas.notification import NotificationFeedResponse
from app.services.event_log import event_log
from app.services.visibility import Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationFeedResponse, status_code=status.HTTP_200_OK)
def poll_notifications(
    last_id: int = Query(0, ge=0, description="Highest event id the client has already seen"),
    role: Optional[str] = Query(None, description="Caller role: staff, reception or admin"),
    user_name: Optional[str] = Query(None, description="Caller name; staff only see visitors they host"),
    db: Session = Depends(get_db)
):
    """
    Return every event after last_id that the caller may see, ascending by id.

    latest_id is the highest id returned, or last_id unchanged when there is
    nothing new, so a client cursor never moves backwards.

    Raises:
        StorageUnavailableError: If the event log cannot be read (503)
    """
    identity = Identity.from_hints(role, user_name)
    events = event_log.query_after(db, last_id, identity)

    if events:
        logger.debug(f"[Notifications] {len(events)} new event(s) after {last_id} for role={identity.role} user={identity.name}")

    return NotificationFeedResponse(
        notifications=events,
        has_new=bool(events),
        latest_id=events[-1].id if events else last_id,
    )
