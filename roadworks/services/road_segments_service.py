from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from roadworks.core.errors import NotFound
from roadworks.core.geometry import polyline_length_meters, to_geojson, validate_polyline
from roadworks.models.enums import ActivityAction
from roadworks.models.project import Project
from roadworks.models.road_segment import RoadSegment
from roadworks.policies.rbac import Caller, require_admin
from roadworks.services.activity_store import ActivityDraft, ActivityStore


class RoadSegmentsService:
    def __init__(self, store: ActivityStore):
        self.store = store

    def create(
        self,
        db: Session,
        caller: Optional[Caller],
        *,
        project_id: uuid.UUID,
        name: str,
        coordinates: Any,
        length_meters: Optional[float] = None,
    ) -> RoadSegment:
        """
        Stores a new segment. Geometry is validated before anything is written;
        length falls back to the haversine length of the polyline.
        """
        caller = require_admin(caller)
        if db.get(Project, project_id) is None:
            raise NotFound("Project not found.")

        coords = validate_polyline(coordinates)
        if length_meters is None:
            length_meters = polyline_length_meters(coords)

        seg = RoadSegment(
            project_id=project_id,
            name=name,
            geometry_json=to_geojson(coords),
            length_meters=float(length_meters),
            created_at=datetime.now(timezone.utc),
        )
        db.add(seg)
        db.commit()
        db.refresh(seg)

        self.store.append(
            db,
            ActivityDraft(
                project_id=project_id,
                actor_id=caller.id,
                action=ActivityAction.SEGMENT_CREATED,
                summary=f"Added road segment: {name}",
                details={"roadSegmentId": str(seg.id), "lengthMeters": round(seg.length_meters, 1)},
            ),
        )
        return seg
