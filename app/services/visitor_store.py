"""
Visitor Store
Visitor lifecycle writes and lookups. Every status-changing write appends its
notification event in the same transaction.
"""
import logging
from datetime import datetime, time, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateVisitorError,
    InvalidStatusTransitionError,
    StorageUnavailableError,
    VisitorNotFoundError,
)
from app.models.notification import NotificationType
from app.models.staff import StaffUser
from app.models.visitor import ALLOWED_TRANSITIONS, Visitor, VisitorStatus
from app.schemas.visitor import VisitorCheckIn
from app.services.event_log import EventLog, event_log as default_event_log

logger = logging.getLogger(__name__)

# Event produced by each status transition; CHECKED_OUT produces none
STATUS_EVENTS = {
    VisitorStatus.APPROVED: (NotificationType.CHECK_IN_APPROVED, "Visit request was approved."),
    VisitorStatus.DECLINED: (NotificationType.CHECK_IN_DECLINED, "Visit request was declined."),
}


def new_visitor_message(full_name: str, host_name: str) -> str:
    return f"New visitor {full_name} for {host_name}"


class VisitorStore:

    def __init__(self, event_log: Optional[EventLog] = None):
        self.event_log = event_log or default_event_log

    def create_visitor(self, db: Session, data: VisitorCheckIn) -> Visitor:
        """
        Insert a PENDING visitor and its NEW_VISITOR event atomically.

        Raises:
            DuplicateVisitorError: the id or invite code is already taken
            StorageUnavailableError: the visitor or its event could not be stored
        """
        fields = data.model_dump(exclude_none=True)
        visitor = Visitor(**fields, status=VisitorStatus.PENDING)

        try:
            db.add(visitor)
            db.flush()
            self.event_log.append(
                db,
                visitor.id,
                NotificationType.NEW_VISITOR,
                new_visitor_message(visitor.full_name, visitor.host_name),
            )
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"[Visitors] Duplicate check-in rejected (id={data.id}, invite_code={data.invite_code}): {e.orig}")
            raise DuplicateVisitorError("A visitor with this id or invite code already exists") from e
        except StorageUnavailableError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Visitors] Check-in failed for '{data.full_name}': {e}", exc_info=True)
            raise StorageUnavailableError("Visitor could not be checked in") from e

        db.refresh(visitor)
        logger.info(f"[Visitors] Checked in visitor {visitor.id} ({visitor.full_name}) for host '{visitor.host_name}'")
        return visitor

    def update_visitor_status(
        self,
        db: Session,
        visitor_id: str,
        new_status: VisitorStatus,
        badge_number: Optional[str] = None,
    ) -> Visitor:
        """
        Move a visitor to new_status and record the matching event in the same transaction.

        Raises:
            VisitorNotFoundError: no visitor with this id
            InvalidStatusTransitionError: the transition is not allowed from the current status
            StorageUnavailableError: the change or its event could not be stored (nothing is kept)
        """
        visitor = self.get_visitor_by_id(db, visitor_id)
        current = visitor.status

        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(
                f"Cannot change visitor {visitor_id} from {current.value} to {new_status.value}"
            )

        now = datetime.now(timezone.utc)
        values = {Visitor.status: new_status}
        if new_status in (VisitorStatus.APPROVED, VisitorStatus.DECLINED):
            values[Visitor.approval_time] = now
            if badge_number:
                values[Visitor.badge_number] = badge_number
        elif new_status == VisitorStatus.CHECKED_OUT:
            values[Visitor.check_out_time] = now

        try:
            # Only applies if the row still holds the status read above; a
            # concurrent change that committed first leaves nothing to update
            claimed = (
                db.query(Visitor)
                .filter(Visitor.id == visitor_id, Visitor.status == current)
                .update(values, synchronize_session=False)
            )
            if claimed == 0:
                db.rollback()
                logger.warning(f"[Visitors] Visitor {visitor_id} changed concurrently, {new_status.value} rejected")
                raise InvalidStatusTransitionError(
                    f"Visitor {visitor_id} is no longer {current.value}; it was changed by another request"
                )

            if new_status in STATUS_EVENTS:
                event_type, message = STATUS_EVENTS[new_status]
                self.event_log.append(db, visitor.id, event_type, message)
            db.commit()
        except StorageUnavailableError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Visitors] Status update {current.value} -> {new_status.value} failed for {visitor_id}: {e}", exc_info=True)
            raise StorageUnavailableError("Visitor status could not be updated") from e

        db.refresh(visitor)
        logger.info(f"[Visitors] Visitor {visitor_id} moved {current.value} -> {new_status.value}")
        return visitor

    def get_visitor_by_id(self, db: Session, visitor_id: str) -> Visitor:
        visitor = db.query(Visitor).filter(Visitor.id == visitor_id).first()
        if not visitor:
            raise VisitorNotFoundError(f"Visitor with ID {visitor_id} not found")
        return visitor

    def get_visitor_by_invite_code(self, db: Session, invite_code: str) -> Visitor:
        visitor = db.query(Visitor).filter(Visitor.invite_code == invite_code.strip()).first()
        if not visitor:
            raise VisitorNotFoundError("Invalid invite code")
        return visitor

    def search_active_visitors(self, db: Session, term: str) -> List[Visitor]:
        """Visitors currently on site (approved, not checked out) whose name or phone contains term."""
        pattern = f"%{term.strip()}%"
        return (
            db.query(Visitor)
            .filter(or_(Visitor.full_name.ilike(pattern), Visitor.phone_number.ilike(pattern)))
            .filter(Visitor.status == VisitorStatus.APPROVED)
            .filter(Visitor.check_out_time.is_(None))
            .order_by(Visitor.created_at.desc())
            .all()
        )

    def list_visitors(self, db: Session, page: int, page_size: int) -> Tuple[int, List[Visitor]]:
        query = db.query(Visitor)
        total = query.count()
        offset = (page - 1) * page_size
        visitors = query.order_by(Visitor.check_in_time.desc()).offset(offset).limit(page_size).all()
        return total, visitors

    def get_today_stats(self, db: Session, today: Optional[datetime] = None) -> dict:
        """Visitor counts by status for visitors checked in today (UTC)."""
        today = today or datetime.now(timezone.utc)
        start = datetime.combine(today.date(), time.min)
        end = datetime.combine(today.date(), time.max)

        rows = (
            db.query(Visitor.status, func.count(Visitor.id))
            .filter(Visitor.check_in_time >= start, Visitor.check_in_time <= end)
            .group_by(Visitor.status)
            .all()
        )
        counts = {status: count for status, count in rows}
        return {
            "total": sum(counts.values()),
            "pending": counts.get(VisitorStatus.PENDING, 0),
            "approved": counts.get(VisitorStatus.APPROVED, 0),
            "declined": counts.get(VisitorStatus.DECLINED, 0),
            "checked_out": counts.get(VisitorStatus.CHECKED_OUT, 0),
        }


def list_users_by_role(db: Session, role: Optional[str] = None) -> List[StaffUser]:
    """Staff directory lookup, ordered by name; all entries when role is empty."""
    query = db.query(StaffUser)
    if role:
        query = query.filter(StaffUser.role == role)
    return query.order_by(StaffUser.name.asc()).all()


def find_host(db: Session, host_name: str) -> Optional[StaffUser]:
    """Find a directory entry by name (case-insensitive, trimmed)."""
    if not host_name or not host_name.strip():
        return None
    return db.query(StaffUser).filter(StaffUser.name.ilike(host_name.strip())).first()


visitor_store = VisitorStore()
