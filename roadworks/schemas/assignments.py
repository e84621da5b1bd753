from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

from roadworks.models.enums import AssignmentStatus


class AssignmentCreateRequest(BaseModel):
    roadSegmentId: str
    contractorId: str
    startAt: datetime
    endAt: datetime
    notes: Optional[str] = Field(default=None, max_length=4000)


class AssignmentPatchRequest(BaseModel):
    status: AssignmentStatus


class ConflictCheckRequest(BaseModel):
    roadSegmentId: str
    startAt: datetime
    endAt: datetime
    excludeAssignmentId: Optional[str] = None


class AssignmentResponse(BaseModel):
    id: str
    roadSegmentId: str
    contractorId: str
    status: AssignmentStatus
    startIso: str
    endIso: str
    notes: Optional[str] = None


class ConflictResponse(BaseModel):
    id: str
    roadSegmentName: str
    contractorName: str
    startIso: str
    endIso: str


class ConflictCheckResponse(BaseModel):
    hasConflicts: bool
    conflicts: List[ConflictResponse]


class ActiveAssignmentResponse(BaseModel):
    id: str
    roadSegmentName: str
    contractorName: str
    startIso: str
    endIso: str
    geometry: List[Tuple[float, float]]
