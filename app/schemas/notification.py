from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from app.models.notification import NotificationType


class NotificationEventResponse(BaseModel):
    """
    A notification event as served by the polling feed.

    visitorName and hostName are joined from the visitor record at read time.
    """
    id: int
    visitor_id: str
    type: NotificationType
    message: str
    created_at: datetime
    visitor_name: Optional[str] = Field(None, alias="visitorName")
    host_name: Optional[str] = Field(None, alias="hostName")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class NotificationFeedResponse(BaseModel):
    """Response of one poll: every visible event after the cursor, ascending by id"""
    notifications: list[NotificationEventResponse]
    has_new: bool
    latest_id: int = Field(..., ge=0, description="Highest id returned, or the request cursor when nothing is new")
