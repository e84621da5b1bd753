from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from roadworks.core.auth_deps import get_current_caller
from roadworks.core.clock import as_utc, utcnow
from roadworks.core.deps import parse_uuid
from roadworks.db.session import get_db
from roadworks.policies.rbac import Caller
from roadworks.schemas.segments import (
    SegmentCreateRequest,
    SegmentResponse,
    SegmentStatusListResponse,
)
from roadworks.services.activity_store import ActivityStore, get_activity_store
from roadworks.services.road_segments_service import RoadSegmentsService
from roadworks.services.segment_status_service import SegmentStatusService

router = APIRouter(prefix="/projects/{projectId}/segments")


@router.get("", response_model=SegmentStatusListResponse)
def list_segment_statuses(
    projectId: str,
    now: Optional[datetime] = Query(default=None, description="Evaluate status at this instant (default: server time)"),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    pid = parse_uuid(projectId, "projectId")
    as_of = as_utc(now) if now is not None else utcnow()

    views = SegmentStatusService().list_segment_statuses(db, caller, pid, now=as_of)
    return {
        "projectId": str(pid),
        "asOfIso": as_of.isoformat(),
        "segments": [
            {
                "id": str(v.id),
                "name": v.name,
                "renderedGeometry": v.rendered_geometry,
                "status": v.status.value,
                "length": v.length,
                "activeAssignmentId": str(v.active_assignment_id) if v.active_assignment_id else None,
            }
            for v in views
        ],
    }


@router.post("", response_model=SegmentResponse)
def create_segment(
    projectId: str,
    body: SegmentCreateRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    seg = RoadSegmentsService(store).create(
        db,
        caller,
        project_id=pid,
        name=body.name,
        coordinates=body.coordinates,
        length_meters=body.lengthMeters,
    )
    return {
        "id": str(seg.id),
        "projectId": str(seg.project_id),
        "name": seg.name,
        "geometry": seg.geometry_json,
        "lengthMeters": seg.length_meters,
    }
