from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from app.core.database import Base
import enum


class StaffRole(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"
    RECEPTION = "reception"


class StaffUser(Base):
    """
    Staff directory entry. Hosts are matched to visitors by name.
    """
    __tablename__ = "vis_users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(32), nullable=True)
    role = Column(SQLEnum(StaffRole, values_callable=lambda e: [m.value for m in e]), nullable=False, index=True)
    department = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<StaffUser(id={self.id}, name='{self.name}', role='{self.role}')>"
