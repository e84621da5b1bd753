#roadworks/policies/activity_policy.py
from __future__ import annotations

import uuid
from typing import Callable, Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from roadworks.models.enums import UserRole
from roadworks.models.project_member import ProjectMember
from roadworks.policies.rbac import Caller


def is_project_member(db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    row = db.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
    ).first()
    return row is not None


def _always(db: Session, caller: Caller, project_id: uuid.UUID) -> bool:
    return True


def _roster(db: Session, caller: Caller, project_id: uuid.UUID) -> bool:
    return is_project_member(db, project_id, caller.id)


# Role -> rule. Membership is the only non-admin route in; nothing is inherited.
FEED_READ_RULES: Dict[UserRole, Callable[[Session, Caller, uuid.UUID], bool]] = {
    UserRole.admin: _always,
    UserRole.contractor: _roster,
    UserRole.other: _roster,
}


def can_read_activity(db: Session, caller: Caller, project_id: uuid.UUID) -> bool:
    """
    Pure predicate over stored state: may ``caller`` read the project's feed?

    An absent project simply yields no membership, so non-admins get False
    for it just like for a project they are not on. The caller must already
    be authenticated.
    """
    return FEED_READ_RULES[caller.role](db, caller, project_id)
