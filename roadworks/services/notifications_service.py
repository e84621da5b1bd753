# roadworks/services/notifications_service.py
from __future__ import annotations

import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from roadworks.core.clock import utcnow
from roadworks.core.errors import NotFound
from roadworks.models.enums import NotificationType
from roadworks.models.notification import Notification
from roadworks.models.project_member import ProjectMember
from roadworks.policies.rbac import Caller, require_caller

logger = logging.getLogger(__name__)

INBOX_SIZE = 30


class NotificationsService:
    """
    Per-user inbox. Rows are written as a side effect of project changes and
    are only ever visible to, and markable by, the user they were sent to.
    """

    # ---------------------------
    # WRITES
    # ---------------------------

    def notify(
        self,
        db: Session,
        user_ids: Iterable[uuid.UUID],
        *,
        title: str,
        message: str,
        kind: NotificationType = NotificationType.system,
        project_id: Optional[uuid.UUID] = None,
    ) -> List[Notification]:
        now = utcnow()
        rows = [
            Notification(
                user_id=uid,
                project_id=project_id,
                type=kind.value,
                title=title,
                message=message,
                is_read=False,
                created_at=now,
            )
            for uid in dict.fromkeys(user_ids)
        ]
        if not rows:
            return rows

        db.add_all(rows)
        db.commit()
        logger.info(
            "notifications sent",
            extra={"type": kind.value, "recipients": len(rows), "project_id": str(project_id) if project_id else None},
        )
        return rows

    def notify_project_members(
        self,
        db: Session,
        project_id: uuid.UUID,
        *,
        exclude: Optional[uuid.UUID] = None,
        **kw,
    ) -> List[Notification]:
        member_ids = db.execute(
            select(ProjectMember.user_id).where(ProjectMember.project_id == project_id)
        ).scalars().all()
        return self.notify(
            db,
            [uid for uid in member_ids if uid != exclude],
            project_id=project_id,
            **kw,
        )

    # ---------------------------
    # INBOX
    # ---------------------------

    def list_for(self, db: Session, caller: Optional[Caller], limit: int = INBOX_SIZE) -> List[Notification]:
        """The caller's latest ``limit`` notifications, newest first."""
        caller = require_caller(caller)
        return (
            db.execute(
                select(Notification)
                .where(Notification.user_id == caller.id)
                .order_by(desc(Notification.created_at), desc(Notification.id))
                .limit(limit)
            )
            .scalars()
            .all()
        )

    def mark_read(self, db: Session, caller: Optional[Caller], notification_id: uuid.UUID) -> Notification:
        caller = require_caller(caller)
        n = db.get(Notification, notification_id)
        # someone else's notification looks exactly like a missing one
        if n is None or n.user_id != caller.id:
            raise NotFound("Notification not found.")

        if not n.is_read:
            n.is_read = True
            db.commit()
            db.refresh(n)
        return n
