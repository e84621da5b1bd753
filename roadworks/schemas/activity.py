from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ActorResponse(BaseModel):
    id: str
    name: str
    email: str


class MilestoneRefResponse(BaseModel):
    id: str
    name: str


class ActivityEntryResponse(BaseModel):
    id: str
    projectId: str
    action: str
    summary: str
    details: Dict[str, Any] = Field(default_factory=dict)
    createdAtIso: str

    actor: ActorResponse
    milestone: Optional[MilestoneRefResponse] = None


class ActivityPollResponse(BaseModel):
    projectId: str
    entries: List[ActivityEntryResponse]
    # ISO-8601; pass back as ?cursor= on the next poll
    nextCursor: str
    nextCursorMs: int
    hasMore: bool = False
    # pass back as ?afterId= together with the cursor when hasMore is true
    nextAfterId: Optional[str] = None


class ActivityHistoryResponse(BaseModel):
    projectId: str
    page: int
    hasMore: bool
    entries: List[ActivityEntryResponse]


class ActivityAppendRequest(BaseModel):
    summary: str = Field(..., min_length=1, max_length=2000)
    action: str = Field(default="NOTE", min_length=1, max_length=96)
    milestoneId: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
