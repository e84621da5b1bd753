# roadworks/api/v1/activity.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from roadworks.core.auth_deps import get_current_caller
from roadworks.core.clock import as_utc
from roadworks.core.config import Settings, get_settings
from roadworks.core.deps import parse_uuid
from roadworks.db.session import get_db
from roadworks.policies.rbac import Caller
from roadworks.schemas.activity import (
    ActivityAppendRequest,
    ActivityEntryResponse,
    ActivityHistoryResponse,
    ActivityPollResponse,
)
from roadworks.services.activity_hook import record_activity
from roadworks.services.activity_store import ActivityStore, get_activity_store
from roadworks.services.change_feed import ChangeFeedPoller

router = APIRouter(prefix="/projects/{projectId}/activity")


def _iso(dt):
    return as_utc(dt).isoformat() if dt else None


def entry_resp(e) -> dict:
    return {
        "id": str(e.id),
        "projectId": str(e.project_id),
        "action": e.action,
        "summary": e.summary,
        "details": e.details_json or {},
        "createdAtIso": _iso(e.created_at),
        "actor": {"id": str(e.actor.id), "name": e.actor.name, "email": e.actor.email},
        "milestone": {"id": str(e.milestone.id), "name": e.milestone.name} if e.milestone else None,
    }


def _resolve_cursor(cursor: Optional[datetime], since: Optional[int]) -> Optional[datetime]:
    if cursor is not None and since is not None:
        raise HTTPException(status_code=400, detail="Pass either cursor or since, not both.")
    if cursor is not None:
        return as_utc(cursor)
    if since is not None:
        return datetime.fromtimestamp(since / 1000, tz=timezone.utc)
    return None


def _poller(store: ActivityStore, settings: Settings) -> ChangeFeedPoller:
    return ChangeFeedPoller(
        store,
        poll_limit=settings.activity_poll_limit,
        page_size=settings.activity_page_size,
    )


@router.get("/poll", response_model=ActivityPollResponse)
def poll_activity(
    projectId: str,
    cursor: Optional[datetime] = Query(default=None, description="ISO-8601 nextCursor of the previous poll"),
    since: Optional[int] = Query(default=None, ge=0, description="Cursor as epoch milliseconds"),
    afterId: Optional[str] = Query(default=None, description="nextAfterId of a truncated poll"),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
    settings: Settings = Depends(get_settings),
):
    pid = parse_uuid(projectId, "projectId")
    resolved = _resolve_cursor(cursor, since)
    after_id = None
    if afterId is not None:
        if resolved is None:
            raise HTTPException(status_code=400, detail="afterId requires cursor or since.")
        after_id = parse_uuid(afterId, "afterId")
    page = _poller(store, settings).poll(db, caller, pid, resolved, after_id=after_id)

    return {
        "projectId": str(pid),
        "entries": [entry_resp(e) for e in page.entries],
        "nextCursor": page.next_cursor.isoformat(),
        # floor to ms; a coarser cursor only re-delivers, never skips
        "nextCursorMs": int(page.next_cursor.timestamp() * 1000),
        "hasMore": page.has_more,
        "nextAfterId": str(page.next_after_id) if page.next_after_id else None,
    }


@router.get("", response_model=ActivityHistoryResponse)
def activity_history(
    projectId: str,
    page: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
    settings: Settings = Depends(get_settings),
):
    pid = parse_uuid(projectId, "projectId")
    hist = _poller(store, settings).history(db, caller, pid, page=page)
    return {
        "projectId": str(pid),
        "page": hist.page,
        "hasMore": hist.has_more,
        "entries": [entry_resp(e) for e in hist.entries],
    }


@router.post("", response_model=ActivityEntryResponse)
def append_activity(
    projectId: str,
    body: ActivityAppendRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_current_caller),
    store: ActivityStore = Depends(get_activity_store),
):
    pid = parse_uuid(projectId, "projectId")
    milestone_id = parse_uuid(body.milestoneId, "milestoneId") if body.milestoneId else None

    e = record_activity(
        db,
        store,
        caller,
        project_id=pid,
        summary=body.summary,
        action=body.action,
        milestone_id=milestone_id,
        details=body.details,
    )
    return entry_resp(e)
