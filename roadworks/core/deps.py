# roadworks/core/deps.py
from __future__ import annotations

import uuid

from fastapi import HTTPException


def parse_uuid(raw: str, name: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{name} must be UUID.")
