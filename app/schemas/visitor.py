from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime
from app.models.visitor import VisitorStatus


class VisitorBase(BaseModel):
    """Base schema for Visitor with common fields"""
    full_name: str = Field(..., min_length=1, max_length=255, description="Name of the visitor")
    email: Optional[EmailStr] = Field(None, description="Email address of the visitor")
    phone_number: Optional[str] = Field(None, max_length=32, description="Phone number of the visitor")
    company: Optional[str] = Field(None, max_length=255, description="Company name of the visitor")
    purpose: Optional[str] = Field(None, max_length=500, description="Reason for the visit")
    host_name: str = Field(..., min_length=1, max_length=255, description="Staff member the visitor wants to meet")
    host_department: Optional[str] = Field(None, max_length=255, description="Department of the host")
    id_type: Optional[str] = Field(None, max_length=64, description="Type of identity document")
    id_number: Optional[str] = Field(None, max_length=128, description="Identity document number")
    invite_code: Optional[str] = Field(None, min_length=1, max_length=64, description="Pre-registration code for express lookup")


class VisitorCheckIn(VisitorBase):
    """Schema for visitor check-in from the kiosk"""
    id: Optional[str] = Field(None, min_length=1, max_length=64, description="Client-generated visitor id; generated when omitted")
    photo_url: Optional[str] = Field(None, description="Captured photo, stored as given")
    signature: Optional[str] = Field(None, description="Captured signature, stored as given")
    check_in_time: Optional[datetime] = Field(None, description="Kiosk check-in time; server time when omitted")


class VisitorStatusUpdate(BaseModel):
    """Schema for a visitor status transition"""
    status: VisitorStatus = Field(..., description="New status for the visitor")
    badge_number: Optional[str] = Field(None, max_length=64, description="Badge handed out on approval")


class VisitorResponse(VisitorBase):
    """Schema for visitor response"""
    id: str
    status: VisitorStatus
    photo_url: Optional[str] = None
    badge_number: Optional[str] = None
    check_in_time: datetime
    approval_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VisitorCheckInResponse(BaseModel):
    """Schema for check-in response with success message"""
    message: str
    visitor: VisitorResponse


class VisitorListResponse(BaseModel):
    """Schema for paginated visitor list"""
    total: int
    visitors: list[VisitorResponse]
    page: int
    page_size: int


class VisitorStatsResponse(BaseModel):
    """Schema for today's visitor statistics"""
    total: int
    pending: int
    approved: int
    declined: int
    checked_out: int
    latest_event_id: int = Field(..., description="Highest notification id, a starting cursor for new clients")
