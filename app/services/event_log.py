"""
Event Log
Append-only, strictly ordered record of visitor status changes.
"""
import logging
from typing import List

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StorageUnavailableError
from app.models.notification import Notification, NotificationType
from app.models.visitor import Visitor
from app.schemas.notification import NotificationEventResponse
from app.services.visibility import Identity, VisibilityFilter

logger = logging.getLogger(__name__)

# Key of the PostgreSQL advisory lock that serialises appends
EVENT_LOG_LOCK_KEY = 7_352_001


class EventLog:
    """
    Writes and reads notification events.

    append() never commits: it runs inside the caller's transaction so a
    visitor mutation and its event are committed (or rolled back) together.
    """

    def __init__(self, visibility: VisibilityFilter = None):
        self.visibility = visibility or VisibilityFilter()

    def append(self, db: Session, visitor_id: str, event_type: NotificationType, message: str) -> int:
        """
        Insert a new event and return its id.

        On PostgreSQL the append holds a transaction-scoped advisory lock until
        commit, so ids become visible in the order they were assigned and a
        reader can never skip past an id that is still uncommitted.
        """
        try:
            if db.get_bind().dialect.name == "postgresql":
                db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": EVENT_LOG_LOCK_KEY})
            event = Notification(visitor_id=visitor_id, type=event_type, message=message)
            db.add(event)
            db.flush()
        except SQLAlchemyError as e:
            logger.error(f"[EventLog] Append failed for visitor {visitor_id} ({event_type.value}): {e}")
            raise StorageUnavailableError("Notification event could not be recorded") from e

        logger.info(f"[EventLog] Appended event {event.id} {event_type.value} for visitor {visitor_id}")
        return event.id

    def query_after(self, db: Session, cursor: int, identity: Identity) -> List[NotificationEventResponse]:
        """
        Return every event with id > cursor visible to identity, ascending by id.

        Each call is an independent point query. Display names are joined from
        the visitor record at read time.
        """
        try:
            rows = (
                db.query(
                    Notification,
                    Visitor.full_name.label("visitor_name"),
                    Visitor.host_name.label("host_name"),
                )
                .outerjoin(Visitor, Visitor.id == Notification.visitor_id)
                .filter(Notification.id > cursor)
                .filter(self.visibility.predicate(identity))
                .order_by(Notification.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"[EventLog] Query after {cursor} failed: {e}")
            raise StorageUnavailableError("Notification feed is temporarily unavailable") from e

        return [
            NotificationEventResponse(
                id=event.id,
                visitor_id=event.visitor_id,
                type=event.type,
                message=event.message,
                created_at=event.created_at,
                visitor_name=visitor_name,
                host_name=host_name,
            )
            for event, visitor_name, host_name in rows
        ]

    def latest_id(self, db: Session) -> int:
        try:
            return db.query(func.max(Notification.id)).scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"[EventLog] Latest id lookup failed: {e}")
            raise StorageUnavailableError("Notification feed is temporarily unavailable") from e


event_log = EventLog()
