# roadworks/api/v1/notifications.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from roadworks.core.auth_deps import get_current_caller
from roadworks.core.clock import as_utc
from roadworks.core.deps import parse_uuid
from roadworks.db.session import get_db
from roadworks.policies.rbac import Caller
from roadworks.schemas.notifications import NotificationListResponse, NotificationResponse
from roadworks.services.notifications_service import NotificationsService

router = APIRouter(prefix="/notifications")


def _resp(n) -> dict:
    return {
        "id": str(n.id),
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "projectId": str(n.project_id) if n.project_id else None,
        "read": n.is_read,
        "createdAtIso": as_utc(n.created_at).isoformat(),
    }


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    rows = NotificationsService().list_for(db, caller)
    return {
        "notifications": [_resp(n) for n in rows],
        "unreadCount": sum(1 for n in rows if not n.is_read),
    }


@router.post("/{notificationId}/read", response_model=NotificationResponse)
def mark_notification_read(
    notificationId: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    nid = parse_uuid(notificationId, "notificationId")
    return _resp(NotificationsService().mark_read(db, caller, nid))
