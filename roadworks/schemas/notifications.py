from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    projectId: Optional[str] = None
    read: bool
    createdAtIso: str


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unreadCount: int
