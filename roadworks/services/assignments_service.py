# roadworks/services/assignments_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from roadworks.core.clock import as_utc, utcnow
from roadworks.core.errors import InvalidAssignmentWindow, InvalidTransition, NotFound
from roadworks.models.assignment import Assignment
from roadworks.models.enums import ActivityAction, AssignmentStatus, NotificationType, UserRole
from roadworks.models.road_segment import RoadSegment
from roadworks.models.user import User
from roadworks.policies.rbac import Caller, require_admin, require_caller
from roadworks.services.activity_store import ActivityDraft, ActivityStore
from roadworks.services.notifications_service import NotificationsService
from roadworks.services.projects_service import ProjectsService

logger = logging.getLogger(__name__)

# active is the only non-terminal state
ALLOWED_TRANSITIONS = {
    AssignmentStatus.active: {AssignmentStatus.completed, AssignmentStatus.cancelled},
    AssignmentStatus.completed: set(),
    AssignmentStatus.cancelled: set(),
}


def _check_window(start_at: datetime, end_at: datetime) -> None:
    if as_utc(start_at) >= as_utc(end_at):
        raise InvalidAssignmentWindow()


class AssignmentsService:
    def __init__(self, store: ActivityStore):
        self.store = store

    # ---------------------------
    # READS
    # ---------------------------

    def get(self, db: Session, assignment_id: uuid.UUID) -> Assignment:
        a = db.execute(
            select(Assignment)
            .options(joinedload(Assignment.road_segment), joinedload(Assignment.contractor))
            .where(Assignment.id == assignment_id)
        ).scalar_one_or_none()
        if not a:
            raise NotFound("Assignment not found.")
        return a

    def find_conflicts(
        self,
        db: Session,
        caller: Optional[Caller],
        *,
        road_segment_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        exclude_assignment_id: Optional[uuid.UUID] = None,
    ) -> List[Assignment]:
        """
        Active assignments on the same segment whose window overlaps
        [start_at, end_at], bounds inclusive. Advisory only: overlaps are
        allowed and resolved by earliest start when computing status.
        """
        require_caller(caller)
        _check_window(start_at, end_at)

        stmt = (
            select(Assignment)
            .options(joinedload(Assignment.road_segment), joinedload(Assignment.contractor))
            .where(
                Assignment.road_segment_id == road_segment_id,
                Assignment.status == AssignmentStatus.active.value,
                Assignment.start_at <= as_utc(end_at),
                Assignment.end_at >= as_utc(start_at),
            )
            .order_by(Assignment.start_at, Assignment.id)
        )
        if exclude_assignment_id is not None:
            stmt = stmt.where(Assignment.id != exclude_assignment_id)
        return db.execute(stmt).scalars().all()

    def list_active(
        self, db: Session, caller: Optional[Caller], now: Optional[datetime] = None
    ) -> List[Assignment]:
        require_caller(caller)
        now = as_utc(now) if now is not None else utcnow()
        return (
            db.execute(
                select(Assignment)
                .options(joinedload(Assignment.road_segment), joinedload(Assignment.contractor))
                .where(
                    Assignment.status == AssignmentStatus.active.value,
                    Assignment.start_at <= now,
                    Assignment.end_at >= now,
                )
                .order_by(Assignment.start_at, Assignment.id)
            )
            .scalars()
            .all()
        )

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def create(
        self,
        db: Session,
        caller: Optional[Caller],
        *,
        road_segment_id: uuid.UUID,
        contractor_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        notes: Optional[str] = None,
    ) -> Assignment:
        """
        Schedules a contractor on a segment. The contractor joins the
        project's roster if not already on it.
        """
        caller = require_admin(caller)
        _check_window(start_at, end_at)

        seg = db.get(RoadSegment, road_segment_id)
        if not seg:
            raise NotFound("Road segment not found.")
        contractor = db.get(User, contractor_id)
        if not contractor or contractor.role != UserRole.contractor.value:
            raise NotFound("Contractor not found.")

        now = utcnow()
        a = Assignment(
            road_segment_id=road_segment_id,
            contractor_id=contractor_id,
            status=AssignmentStatus.active.value,
            start_at=as_utc(start_at),
            end_at=as_utc(end_at),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        db.add(a)
        db.commit()
        db.refresh(a)

        ProjectsService(self.store).ensure_member(db, seg.project_id, contractor_id)

        self.store.append(
            db,
            ActivityDraft(
                project_id=seg.project_id,
                actor_id=caller.id,
                action=ActivityAction.ASSIGNMENT_CREATED,
                summary=f"Assigned {contractor.name} to {seg.name}",
                details={
                    "assignmentId": str(a.id),
                    "roadSegmentId": str(seg.id),
                    "contractorId": str(contractor_id),
                    "startIso": as_utc(a.start_at).isoformat(),
                    "endIso": as_utc(a.end_at).isoformat(),
                },
            ),
        )
        NotificationsService().notify(
            db,
            [contractor_id],
            kind=NotificationType.assignment,
            title="New road assignment",
            message=f"You were assigned to {seg.name}.",
            project_id=seg.project_id,
        )
        return a

    def transition(
        self,
        db: Session,
        caller: Optional[Caller],
        assignment_id: uuid.UUID,
        status: AssignmentStatus,
    ) -> Assignment:
        caller = require_admin(caller)

        a = self.get(db, assignment_id)
        current = AssignmentStatus(a.status)
        if status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot move assignment from {current.value} to {status.value}.")

        a.status = status.value
        a.updated_at = utcnow()
        db.add(a)
        db.commit()
        db.refresh(a)

        logger.info(
            "assignment status changed",
            extra={"assignment_id": str(a.id), "from": current.value, "to": status.value},
        )

        seg = a.road_segment
        self.store.append(
            db,
            ActivityDraft(
                project_id=seg.project_id,
                actor_id=caller.id,
                action=ActivityAction.ASSIGNMENT_STATUS_CHANGED,
                summary=f"Assignment on {seg.name} marked {status.value}",
                details={"assignmentId": str(a.id), "from": current.value, "to": status.value},
            ),
        )
        return a
