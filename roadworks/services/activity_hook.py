from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from roadworks.core.errors import Forbidden, NotFound
from roadworks.models.activity_entry import ActivityEntry
from roadworks.models.enums import ActivityAction
from roadworks.models.milestone import Milestone
from roadworks.models.project import Project
from roadworks.policies.activity_policy import can_read_activity
from roadworks.policies.rbac import Caller, require_caller
from roadworks.services.activity_store import ActivityDraft, ActivityStore


def record_activity(
    db: Session,
    store: ActivityStore,
    caller: Optional[Caller],
    *,
    project_id: uuid.UUID,
    summary: str,
    action: str = ActivityAction.NOTE,
    milestone_id: Optional[uuid.UUID] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityEntry:
    """
    Append hook for other subsystems. The caller becomes the actor and must
    be allowed to read the feed it writes to.
    """
    caller = require_caller(caller)
    if not can_read_activity(db, caller, project_id):
        raise Forbidden("Not authorized to write to this project's activity.")
    if db.get(Project, project_id) is None:
        raise NotFound("Project not found.")

    if milestone_id is not None:
        m = db.get(Milestone, milestone_id)
        if m is None or m.project_id != project_id:
            raise NotFound("Milestone not found.")

    return store.append(
        db,
        ActivityDraft(
            project_id=project_id,
            actor_id=caller.id,
            summary=summary,
            action=action,
            milestone_id=milestone_id,
            details=details or {},
        ),
    )
