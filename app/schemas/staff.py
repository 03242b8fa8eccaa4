from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime
from app.models.staff import StaffRole


class StaffBase(BaseModel):
    """Base schema for a staff directory entry"""
    name: str = Field(..., min_length=1, max_length=255, description="Full name, matched against visitor host names")
    email: EmailStr = Field(..., description="Email address of the staff member")
    phone_number: Optional[str] = Field(None, max_length=32, description="Phone number used for host alerts")
    role: StaffRole = Field(..., description="admin, staff or reception")
    department: Optional[str] = Field(None, max_length=255)


class StaffCreate(StaffBase):
    pass


class StaffUpdate(BaseModel):
    """Schema for updating a staff directory entry"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=32)
    role: Optional[StaffRole] = None
    department: Optional[str] = Field(None, max_length=255)


class StaffResponse(StaffBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
