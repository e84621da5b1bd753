#roadworks/schemas/projects.py
from __future__ import annotations

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field


class ProjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    status: str = Field(default="planning", min_length=1, max_length=64)
    wardId: Optional[str] = None


class ProjectStatusPatchRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=64)


class ProjectResponse(BaseModel):
    projectId: str
    name: str
    status: str
    wardId: Optional[str] = None
    createdAtIso: str
    updatedAtIso: str


class MemberAddRequest(BaseModel):
    userId: str


class MemberResponse(BaseModel):
    userId: str
    name: str
    role: str
    assignedAtIso: str


class MemberListResponse(BaseModel):
    projectId: str
    members: List[MemberResponse]


class MilestoneCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    dueDate: Optional[date] = None


class MilestoneResponse(BaseModel):
    id: str
    projectId: str
    name: str
    dueDate: Optional[date] = None
    createdAtIso: str


class MilestoneListResponse(BaseModel):
    projectId: str
    milestones: List[MilestoneResponse]
