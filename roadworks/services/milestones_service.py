from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from roadworks.core.errors import Forbidden, NotFound
from roadworks.models.enums import ActivityAction, NotificationType
from roadworks.models.milestone import Milestone
from roadworks.models.project import Project
from roadworks.policies.activity_policy import can_read_activity
from roadworks.policies.rbac import Caller, require_caller
from roadworks.services.activity_store import ActivityDraft, ActivityStore
from roadworks.services.notifications_service import NotificationsService


class MilestonesService:
    def __init__(self, store: ActivityStore):
        self.store = store

    def _authorize(self, db: Session, caller: Optional[Caller], project_id: uuid.UUID) -> Caller:
        caller = require_caller(caller)
        if not can_read_activity(db, caller, project_id):
            raise Forbidden("Not authorized for this project.")
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        return caller

    def list(self, db: Session, caller: Optional[Caller], project_id: uuid.UUID) -> List[Milestone]:
        self._authorize(db, caller, project_id)
        return (
            db.execute(
                select(Milestone)
                .where(Milestone.project_id == project_id)
                .order_by(Milestone.created_at, Milestone.id)
            )
            .scalars()
            .all()
        )

    def create(
        self,
        db: Session,
        caller: Optional[Caller],
        *,
        project_id: uuid.UUID,
        name: str,
        due_date: Optional[date] = None,
    ) -> Milestone:
        caller = self._authorize(db, caller, project_id)

        m = Milestone(
            project_id=project_id,
            name=name,
            due_date=due_date,
            created_at=datetime.now(timezone.utc),
        )
        db.add(m)
        db.commit()
        db.refresh(m)

        self.store.append(
            db,
            ActivityDraft(
                project_id=project_id,
                actor_id=caller.id,
                action=ActivityAction.MILESTONE_CREATED,
                summary=f"Created milestone: {name}",
                milestone_id=m.id,
            ),
        )
        NotificationsService().notify_project_members(
            db,
            project_id,
            exclude=caller.id,
            kind=NotificationType.milestone,
            title="New milestone created",
            message=f'Milestone "{name}" was added to your project.',
        )
        return m
