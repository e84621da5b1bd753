# roadworks/services/projects_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from roadworks.core.errors import Forbidden, NotFound
from roadworks.models.enums import ActivityAction
from roadworks.models.project import Project
from roadworks.models.project_member import ProjectMember
from roadworks.models.user import User
from roadworks.models.ward import Ward
from roadworks.policies.activity_policy import can_read_activity
from roadworks.policies.rbac import Caller, require_admin, require_caller
from roadworks.services.activity_store import ActivityDraft, ActivityStore

logger = logging.getLogger(__name__)


class ProjectsService:
    def __init__(self, store: ActivityStore):
        self.store = store

    # ---------------------------
    # PROJECTS
    # ---------------------------

    def create(
        self,
        db: Session,
        caller: Optional[Caller],
        *,
        name: str,
        status: str = "planning",
        ward_id: Optional[uuid.UUID] = None,
    ) -> Project:
        require_admin(caller)
        if ward_id is not None and db.get(Ward, ward_id) is None:
            raise NotFound("Ward not found.")

        now = datetime.now(timezone.utc)
        p = Project(
            name=name,
            status=status,
            ward_id=ward_id,
            created_at=now,
            updated_at=now,
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    def get(self, db: Session, project_id: uuid.UUID) -> Project:
        p = db.get(Project, project_id)
        if not p:
            raise NotFound("Project not found.")
        return p

    def set_status(self, db: Session, caller: Optional[Caller], project_id: uuid.UUID, status: str) -> Project:
        """Admin-only. Setting the current status again is a no-op and logs nothing."""
        caller = require_admin(caller)
        p = self.get(db, project_id)
        previous = p.status
        if previous == status:
            return p

        p.status = status
        p.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(p)
        logger.info("project status changed", extra={"project_id": str(project_id), "from": previous, "to": status})

        self.store.append(
            db,
            ActivityDraft(
                project_id=project_id,
                actor_id=caller.id,
                action=ActivityAction.PROJECT_STATUS_CHANGED,
                summary=f"Project status changed from {previous} to {status}",
                details={"from": previous, "to": status},
            ),
        )
        return p

    # ---------------------------
    # MEMBERS
    # ---------------------------

    def list_members(self, db: Session, caller: Optional[Caller], project_id: uuid.UUID) -> List[ProjectMember]:
        caller = require_caller(caller)
        if not can_read_activity(db, caller, project_id):
            raise Forbidden("Not authorized to view this project.")
        self.get(db, project_id)
        return (
            db.execute(
                select(ProjectMember)
                .options(joinedload(ProjectMember.user))
                .where(ProjectMember.project_id == project_id)
                .order_by(ProjectMember.assigned_at, ProjectMember.id)
            )
            .scalars()
            .all()
        )

    def _member(self, db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> Optional[ProjectMember]:
        return db.execute(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        ).scalar_one_or_none()

    def ensure_member(self, db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> tuple[ProjectMember, bool]:
        """Returns (row, created). A duplicate pair is never inserted."""
        existing = self._member(db, project_id, user_id)
        if existing:
            return existing, False

        row = ProjectMember(
            project_id=project_id,
            user_id=user_id,
            assigned_at=datetime.now(timezone.utc),
        )
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent add of the same pair
            db.rollback()
            existing = self._member(db, project_id, user_id)
            if existing is None:
                raise
            return existing, False
        db.refresh(row)
        return row, True

    def add_member(
        self, db: Session, caller: Optional[Caller], project_id: uuid.UUID, user_id: uuid.UUID
    ) -> ProjectMember:
        caller = require_admin(caller)
        self.get(db, project_id)
        user = db.get(User, user_id)
        if not user:
            raise NotFound("User not found.")

        row, created = self.ensure_member(db, project_id, user_id)
        if created:
            self.store.append(
                db,
                ActivityDraft(
                    project_id=project_id,
                    actor_id=caller.id,
                    action=ActivityAction.MEMBER_ADDED,
                    summary=f"Added {user.name} to the project",
                    details={"userId": str(user_id)},
                ),
            )
        return row

    def remove_member(
        self, db: Session, caller: Optional[Caller], project_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        caller = require_admin(caller)
        row = self._member(db, project_id, user_id)
        if not row:
            raise NotFound("Not a member of this project.")

        db.delete(row)
        db.commit()
        logger.info("project member removed", extra={"project_id": str(project_id), "user_id": str(user_id)})

        self.store.append(
            db,
            ActivityDraft(
                project_id=project_id,
                actor_id=caller.id,
                action=ActivityAction.MEMBER_REMOVED,
                summary="Removed a member from the project",
                details={"userId": str(user_id)},
            ),
        )
