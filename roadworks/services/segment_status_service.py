from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from roadworks.core.assignment_windows import malformed_assignments, status_of
from roadworks.core.clock import as_utc, utcnow
from roadworks.core.errors import NotFound
from roadworks.core.geometry import LatLng, project
from roadworks.models.assignment import Assignment
from roadworks.models.enums import AssignmentStatus, SegmentState
from roadworks.models.project import Project
from roadworks.models.road_segment import RoadSegment
from roadworks.policies.rbac import Caller, require_caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentStatusView:
    id: uuid.UUID
    name: str
    rendered_geometry: List[LatLng]
    status: SegmentState
    length: float
    active_assignment_id: Optional[uuid.UUID] = None


class SegmentStatusService:
    """Live status of every road segment in a project. Recomputed on each call."""

    def list_segment_statuses(
        self,
        db: Session,
        caller: Optional[Caller],
        project_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> List[SegmentStatusView]:
        require_caller(caller)
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")

        now = as_utc(now) if now is not None else utcnow()

        segments = (
            db.execute(
                select(RoadSegment)
                .where(RoadSegment.project_id == project_id)
                .order_by(RoadSegment.name, RoadSegment.id)
            )
            .scalars()
            .all()
        )
        if not segments:
            return []

        rows = (
            db.execute(
                select(Assignment).where(
                    Assignment.road_segment_id.in_([s.id for s in segments]),
                    Assignment.status == AssignmentStatus.active.value,
                )
            )
            .scalars()
            .all()
        )

        for bad in malformed_assignments(rows):
            logger.warning(
                "malformed assignment window excluded from segment status",
                extra={
                    "assignment_id": str(bad.id),
                    "road_segment_id": str(bad.road_segment_id),
                    "start_at": bad.start_at.isoformat() if bad.start_at else None,
                    "end_at": bad.end_at.isoformat() if bad.end_at else None,
                },
            )

        by_segment: Dict[uuid.UUID, List[Assignment]] = defaultdict(list)
        for a in rows:
            by_segment[a.road_segment_id].append(a)

        views: List[SegmentStatusView] = []
        for seg in segments:
            result = status_of(seg, by_segment.get(seg.id, []), now)
            views.append(
                SegmentStatusView(
                    id=seg.id,
                    name=seg.name,
                    rendered_geometry=project(seg.geometry_json),
                    status=result.status,
                    length=float(seg.length_meters),
                    active_assignment_id=result.active_assignment.id if result.active_assignment else None,
                )
            )
        return views
