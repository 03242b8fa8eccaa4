from app.models.visitor import Visitor, VisitorStatus
from app.models.notification import Notification, NotificationType
from app.models.staff import StaffUser, StaffRole

__all__ = ["Visitor", "VisitorStatus", "Notification", "NotificationType", "StaffUser", "StaffRole"]
