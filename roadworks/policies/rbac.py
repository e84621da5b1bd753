#roadworks/policies/rbac.py
from __future__ import annotations
import uuid
from dataclasses import dataclass

from roadworks.core.errors import Forbidden, Unauthenticated
from roadworks.models.enums import UserRole


@dataclass(frozen=True)
class Caller:
    id: uuid.UUID
    role: UserRole
    name: str = "Unknown"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def require_caller(caller: Caller | None) -> Caller:
    if caller is None:
        raise Unauthenticated()
    return caller


def require_admin(caller: Caller | None) -> Caller:
    caller = require_caller(caller)
    if not caller.is_admin:
        raise Forbidden(f"Role {caller.role.value} not permitted for this action.")
    return caller
