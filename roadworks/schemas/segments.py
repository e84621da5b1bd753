from __future__ import annotations

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field


class SegmentStatusResponse(BaseModel):
    id: str
    name: str
    # (latitude, longitude) pairs, display order
    renderedGeometry: List[Tuple[float, float]]
    status: str
    length: float
    activeAssignmentId: Optional[str] = None


class SegmentStatusListResponse(BaseModel):
    projectId: str
    asOfIso: str
    segments: List[SegmentStatusResponse]


class SegmentCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    # storage order: [longitude, latitude]
    coordinates: List[List[float]]
    lengthMeters: Optional[float] = Field(default=None, gt=0)


class SegmentResponse(BaseModel):
    id: str
    projectId: str
    name: str
    geometry: dict
    lengthMeters: float
