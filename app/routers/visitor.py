from fastapi import APIRouter, Depends, status, Query, BackgroundTasks
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.database import get_db, get_thread_db
from app.core.config import settings
from app.schemas.visitor import (
    VisitorCheckIn,
    VisitorStatusUpdate,
    VisitorResponse,
    VisitorCheckInResponse,
    VisitorListResponse,
    VisitorStatsResponse,
)
from app.services.event_log import event_log
from app.services.visitor_store import visitor_store, find_host
from app.services.email_service import email_service
from app.services.webhook_service import webhook_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/visitors", tags=["Visitors"])


def notify_host_background(visitor_id: str):
    """
    Background task: email the host and post the check-in webhook.

    Runs after the response with its own session. Failures are logged only;
    the NEW_VISITOR event is already committed.
    """
    db = get_thread_db()
    try:
        visitor = visitor_store.get_visitor_by_id(db, visitor_id)
        host = find_host(db, visitor.host_name)

        details = dict(
            company=visitor.company,
            phone_number=visitor.phone_number,
            purpose=visitor.purpose,
            host_department=visitor.host_department,
        )

        if host and host.email:
            email_service.send_host_alert(host.email, visitor.full_name, visitor.host_name, **details)
        else:
            logger.info(f"[HostAlert] No directory email for host '{visitor.host_name}', email skipped")

        payload = webhook_service.build_check_in_payload(
            visitor_name=visitor.full_name,
            host_name=visitor.host_name,
            email=visitor.email,
            host_phone=host.phone_number if host else None,
            host_email=host.email if host else None,
            **details,
        )
        webhook_service.send_check_in_alert(payload)
    except Exception as e:
        logger.error(f"[HostAlert] Error notifying host for visitor {visitor_id}: {e}", exc_info=True)
    finally:
        db.close()


@router.post("/", response_model=VisitorCheckInResponse, status_code=status.HTTP_201_CREATED)
def check_in_visitor(
    visitor_data: VisitorCheckIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    """
    Check in a new visitor from the kiosk. The visitor starts PENDING and a
    NEW_VISITOR notification is recorded in the same transaction.

    Args:
        visitor_data: Visitor check-in information
        db: Database session

    Returns:
        Created visitor information with check-in details
    """
    visitor = visitor_store.create_visitor(db, visitor_data)

    background_tasks.add_task(notify_host_background, visitor.id)

    return VisitorCheckInResponse(
        message="Visitor checked in successfully",
        visitor=VisitorResponse.model_validate(visitor)
    )


@router.get("/", response_model=VisitorListResponse, status_code=status.HTTP_200_OK)
def get_all_visitors(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Number of items per page"),
    db: Session = Depends(get_db)
):
    """
    Get all visitors, newest check-in first.
    """
    total, visitors = visitor_store.list_visitors(db, page, page_size)

    return VisitorListResponse(
        total=total,
        visitors=[VisitorResponse.model_validate(visitor) for visitor in visitors],
        page=page,
        page_size=page_size
    )


@router.get("/stats", response_model=VisitorStatsResponse, status_code=status.HTTP_200_OK)
def get_visitor_stats(db: Session = Depends(get_db)):
    """
    Today's visitor counts by status, plus the latest notification id so a
    freshly opened dashboard can start polling from "now".
    """
    stats = visitor_store.get_today_stats(db)
    return VisitorStatsResponse(**stats, latest_event_id=event_log.latest_id(db))


@router.get("/search", response_model=List[VisitorResponse], status_code=status.HTTP_200_OK)
def search_visitors(
    q: str = Query(..., min_length=1, description="Name or phone number fragment"),
    db: Session = Depends(get_db)
):
    """
    Search visitors currently on site, used by the check-out kiosk.
    """
    visitors = visitor_store.search_active_visitors(db, q)
    return [VisitorResponse.model_validate(visitor) for visitor in visitors]


@router.get("/invite/{invite_code}", response_model=VisitorResponse, status_code=status.HTTP_200_OK)
def get_visitor_by_invite_code(invite_code: str, db: Session = Depends(get_db)):
    """
    Express lookup of a pre-registered visitor by invite code.

    Raises:
        VisitorNotFoundError: If no visitor carries this code
    """
    return VisitorResponse.model_validate(visitor_store.get_visitor_by_invite_code(db, invite_code))


@router.get("/{visitor_id}", response_model=VisitorResponse, status_code=status.HTTP_200_OK)
def get_visitor_by_id(visitor_id: str, db: Session = Depends(get_db)):
    """
    Get a specific visitor by ID.

    Raises:
        VisitorNotFoundError: If visitor not found
    """
    return VisitorResponse.model_validate(visitor_store.get_visitor_by_id(db, visitor_id))


@router.patch("/{visitor_id}/status", response_model=VisitorResponse, status_code=status.HTTP_200_OK)
def update_visitor_status(
    visitor_id: str,
    status_data: VisitorStatusUpdate,
    db: Session = Depends(get_db)
):
    """
    Approve, decline or check out a visitor.

    Approval and decline record a notification in the same transaction; if
    that event cannot be stored the status change is rolled back and the call
    fails with 503.

    Args:
        visitor_id: ID of the visitor
        status_data: New status (APPROVED, DECLINED or CHECKED_OUT) and optional badge number
        db: Database session

    Raises:
        VisitorNotFoundError: If visitor not found
        InvalidStatusTransitionError: If the visitor cannot move to the requested status
    """
    visitor = visitor_store.update_visitor_status(
        db,
        visitor_id,
        status_data.status,
        badge_number=status_data.badge_number,
    )
    return VisitorResponse.model_validate(visitor)
