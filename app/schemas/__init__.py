from app.schemas.visitor import (
    VisitorCheckIn,
    VisitorStatusUpdate,
    VisitorResponse,
    VisitorCheckInResponse,
    VisitorListResponse,
    VisitorStatsResponse,
)
from app.schemas.notification import (
    NotificationEventResponse,
    NotificationFeedResponse,
)
from app.schemas.staff import (
    StaffCreate,
    StaffUpdate,
    StaffResponse,
)

__all__ = [
    "VisitorCheckIn",
    "VisitorStatusUpdate",
    "VisitorResponse",
    "VisitorCheckInResponse",
    "VisitorListResponse",
    "VisitorStatsResponse",
    "NotificationEventResponse",
    "NotificationFeedResponse",
    "StaffCreate",
    "StaffUpdate",
    "StaffResponse",
]
