#roadworks/core/auth_deps.py
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from roadworks.core.security import decode_token
from roadworks.models.enums import UserRole
from roadworks.policies.rbac import Caller

# No header is not an error here; services decide whether a caller is required.
bearer = HTTPBearer(auto_error=False)


def get_current_caller(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[Caller]:
    """
    Identity of the request, or None when no bearer token was sent.

    A token that is present but invalid, expired or missing claims is
    rejected with 401 right here.
    """
    if creds is None:
        return None

    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")

    sub = payload.get("sub")
    role = payload.get("role")
    if not sub or not role:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    try:
        user_id = uuid.UUID(str(sub))
        role_enum = UserRole(role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid subject or role in token.")

    caller = Caller(id=user_id, role=role_enum, name=str(payload.get("name") or "Unknown"))
    request.state.caller = caller
    return caller
