from sqlalchemy import Column, String, Text, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from app.core.database import Base
import enum
import uuid


class VisitorStatus(str, enum.Enum):
    """Enum for visitor check-in status"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    CHECKED_OUT = "CHECKED_OUT"


# Status changes a visitor record may go through; everything else is rejected.
ALLOWED_TRANSITIONS = {
    VisitorStatus.PENDING: {VisitorStatus.APPROVED, VisitorStatus.DECLINED},
    VisitorStatus.APPROVED: {VisitorStatus.CHECKED_OUT},
    VisitorStatus.DECLINED: set(),
    VisitorStatus.CHECKED_OUT: set(),
}


def generate_visitor_id() -> str:
    return uuid.uuid4().hex


class Visitor(Base):
    """
    Visitor model for the check-in/check-out lifecycle.
    Records are never deleted; status only moves along ALLOWED_TRANSITIONS.
    """
    __tablename__ = "vis_visitors"

    id = Column(String(64), primary_key=True, default=generate_visitor_id)
    full_name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True, index=True)
    company = Column(String(255), nullable=True)
    purpose = Column(String(500), nullable=True)
    host_name = Column(String(255), nullable=False, index=True)
    host_department = Column(String(255), nullable=True)
    photo_url = Column(Text, nullable=True)  # Opaque, usually a base64 data URL
    signature = Column(Text, nullable=True)
    invite_code = Column(String(64), unique=True, nullable=True, index=True)
    id_type = Column(String(64), nullable=True)
    id_number = Column(String(128), nullable=True)
    badge_number = Column(String(64), nullable=True)
    status = Column(SQLEnum(VisitorStatus), default=VisitorStatus.PENDING, nullable=False, index=True)

    # Timestamps
    check_in_time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    approval_time = Column(DateTime(timezone=True), nullable=True)
    check_out_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Visitor(id={self.id}, name='{self.full_name}', host='{self.host_name}', status='{self.status}')>"
