from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from laundry_service.schemas.order import Pagination


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class NotificationMarkRead(BaseModel):
    notification_ids: List[str] = Field(default_factory=list, max_length=100)
    mark_all: bool = False


class NotificationMarkReadResponse(BaseModel):
    updated: int
