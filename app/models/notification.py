from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from app.core.database import Base
import enum


class NotificationType(str, enum.Enum):
    """Visitor status changes that produce a notification event"""
    NEW_VISITOR = "NEW_VISITOR"
    CHECK_IN_APPROVED = "CHECK_IN_APPROVED"
    CHECK_IN_DECLINED = "CHECK_IN_DECLINED"


class Notification(Base):
    """
    Append-only notification event.

    The id is the polling cursor: it is assigned by the database, strictly
    increasing and never reused. visitor_id is a lookup reference only
    (no foreign key).
    """
    __tablename__ = "vis_notifications"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    visitor_id = Column(String(64), nullable=False, index=True)
    type = Column(SQLEnum(NotificationType), nullable=False)
    message = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, visitor_id='{self.visitor_id}', type='{self.type}')>"
