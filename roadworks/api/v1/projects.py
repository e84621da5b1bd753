# roadworks/api/v1/projects.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from roadworks.core.auth_deps import get_current_caller
from roadworks.core.clock import as_utc
from roadworks.core.deps import parse_uuid
from roadworks.core.errors import Forbidden
from roadworks.db.session import get_db
from roadworks.policies.activity_policy import can_read_activity
from roadworks.policies.rbac import Caller, require_caller
from roadworks.schemas.projects import (
    MemberAddRequest,
    MemberListResponse,
    MemberResponse,
    MilestoneCreateRequest,
    MilestoneListResponse,
    MilestoneResponse,
    ProjectCreateRequest,
    ProjectResponse,
    ProjectStatusPatchRequest,
)
from roadworks.services.activity_store import ActivityStore, get_activity_store
from roadworks.services.milestones_service import MilestonesService
from roadworks.services.projects_service import ProjectsService

router = APIRouter(prefix="/projects")


def _iso(dt):
    return as_utc(dt).isoformat() if dt else None


def _resp(p) -> dict:
    return {
        "projectId": str(p.id),
        "name": p.name,
        "status": p.status,
        "wardId": str(p.ward_id) if p.ward_id else None,
        "createdAtIso": _iso(p.created_at),
        "updatedAtIso": _iso(p.updated_at),
    }


def _member_resp(m) -> dict:
    return {
        "userId": str(m.user_id),
        "name": m.user.name,
        "role": m.user.role,
        "assignedAtIso": _iso(m.assigned_at),
    }


def _milestone_resp(m) -> dict:
    return {
        "id": str(m.id),
        "projectId": str(m.project_id),
        "name": m.name,
        "dueDate": m.due_date,
        "createdAtIso": _iso(m.created_at),
    }


@router.post("", response_model=ProjectResponse)
def create_project(
    body: ProjectCreateRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    p = ProjectsService(store).create(
        db,
        caller,
        name=body.name,
        status=body.status,
        ward_id=parse_uuid(body.wardId, "wardId") if body.wardId else None,
    )
    return _resp(p)


@router.get("/{projectId}", response_model=ProjectResponse)
def get_project(
    projectId: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    caller = require_caller(caller)
    if not can_read_activity(db, caller, pid):
        raise Forbidden("Not authorized to view this project.")
    return _resp(ProjectsService(store).get(db, pid))


@router.patch("/{projectId}/status", response_model=ProjectResponse)
def update_project_status(
    projectId: str,
    body: ProjectStatusPatchRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    p = ProjectsService(store).set_status(db, caller, pid, body.status)
    return _resp(p)


# ------------------------------------------------------------------
# MEMBERS
# ------------------------------------------------------------------


@router.get("/{projectId}/members", response_model=MemberListResponse)
def list_members(
    projectId: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    rows = ProjectsService(store).list_members(db, caller, pid)
    return {"projectId": str(pid), "members": [_member_resp(m) for m in rows]}


@router.post("/{projectId}/members", response_model=MemberResponse)
def add_member(
    projectId: str,
    body: MemberAddRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    uid = parse_uuid(body.userId, "userId")
    m = ProjectsService(store).add_member(db, caller, pid, uid)
    return _member_resp(m)


@router.delete("/{projectId}/members/{userId}", status_code=204)
def remove_member(
    projectId: str,
    userId: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    uid = parse_uuid(userId, "userId")
    ProjectsService(store).remove_member(db, caller, pid, uid)
    return Response(status_code=204)


# ------------------------------------------------------------------
# MILESTONES
# ------------------------------------------------------------------


@router.get("/{projectId}/milestones", response_model=MilestoneListResponse)
def list_milestones(
    projectId: str,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    rows = MilestonesService(store).list(db, caller, pid)
    return {"projectId": str(pid), "milestones": [_milestone_resp(m) for m in rows]}


@router.post("/{projectId}/milestones", response_model=MilestoneResponse)
def create_milestone(
    projectId: str,
    body: MilestoneCreateRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    m = MilestonesService(store).create(db, caller, project_id=pid, name=body.name, due_date=body.dueDate)
    return _milestone_resp(m)
