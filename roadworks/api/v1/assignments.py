# roadworks/api/v1/assignments.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from roadworks.core.auth_deps import get_current_caller
from roadworks.core.clock import as_utc
from roadworks.core.deps import parse_uuid
from roadworks.core.geometry import project
from roadworks.db.session import get_db
from roadworks.policies.rbac import Caller
from roadworks.schemas.assignments import (
    ActiveAssignmentResponse,
    AssignmentCreateRequest,
    AssignmentPatchRequest,
    AssignmentResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
)
from roadworks.services.activity_store import ActivityStore, get_activity_store
from roadworks.services.assignments_service import AssignmentsService

router = APIRouter(prefix="/assignments")


def _iso(dt):
    return as_utc(dt).isoformat() if dt else None


def _resp(a) -> dict:
    return {
        "id": str(a.id),
        "roadSegmentId": str(a.road_segment_id),
        "contractorId": str(a.contractor_id),
        "status": a.status,
        "startIso": _iso(a.start_at),
        "endIso": _iso(a.end_at),
        "notes": a.notes,
    }


@router.post("", response_model=AssignmentResponse)
def create_assignment(
    body: AssignmentCreateRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    a = AssignmentsService(store).create(
        db,
        caller,
        road_segment_id=parse_uuid(body.roadSegmentId, "roadSegmentId"),
        contractor_id=parse_uuid(body.contractorId, "contractorId"),
        start_at=body.startAt,
        end_at=body.endAt,
        notes=body.notes,
    )
    return _resp(a)


@router.patch("/{assignmentId}", response_model=AssignmentResponse)
def patch_assignment(
    assignmentId: str,
    body: AssignmentPatchRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    aid = parse_uuid(assignmentId, "assignmentId")
    a = AssignmentsService(store).transition(db, caller, aid, body.status)
    return _resp(a)


@router.post("/check-conflicts", response_model=ConflictCheckResponse)
def check_conflicts(
    body: ConflictCheckRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    rows = AssignmentsService(store).find_conflicts(
        db,
        caller,
        road_segment_id=parse_uuid(body.roadSegmentId, "roadSegmentId"),
        start_at=body.startAt,
        end_at=body.endAt,
        exclude_assignment_id=(
            parse_uuid(body.excludeAssignmentId, "excludeAssignmentId") if body.excludeAssignmentId else None
        ),
    )
    return {
        "hasConflicts": bool(rows),
        "conflicts": [
            {
                "id": str(a.id),
                "roadSegmentName": a.road_segment.name,
                "contractorName": a.contractor.name,
                "startIso": _iso(a.start_at),
                "endIso": _iso(a.end_at),
            }
            for a in rows
        ],
    }


@router.get("/active", response_model=list[ActiveAssignmentResponse])
def active_assignments(
    now: Optional[datetime] = Query(default=None),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    rows = AssignmentsService(store).list_active(db, caller, now)
    return [
        {
            "id": str(a.id),
            "roadSegmentName": a.road_segment.name,
            "contractorName": a.contractor.name,
            "startIso": _iso(a.start_at),
            "endIso": _iso(a.end_at),
            "geometry": project(a.road_segment.geometry_json),
        }
        for a in rows
    ]
