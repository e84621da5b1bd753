"""
Segment status from assignment windows.

A segment is active at ``now`` when it has at least one assignment with
status ``active`` whose window contains ``now`` (both ends inclusive).
Among several, the earliest start wins and equal starts fall back to the
lowest assignment id, so the answer never depends on input order.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from roadworks.core.clock import as_utc
from roadworks.models.enums import AssignmentStatus, SegmentState


@dataclass(frozen=True)
class SegmentStatus:
    status: SegmentState
    active_assignment: Optional[Any] = None


def is_malformed(assignment: Any) -> bool:
    start, end = as_utc(assignment.start_at), as_utc(assignment.end_at)
    return start is None or end is None or start >= end


def malformed_assignments(assignments: Iterable[Any]) -> List[Any]:
    return [a for a in assignments if is_malformed(a)]


def _covers(assignment: Any, now: datetime) -> bool:
    return as_utc(assignment.start_at) <= now <= as_utc(assignment.end_at)


def status_of(segment: Any, assignments: Iterable[Any], now: datetime) -> SegmentStatus:
    now = as_utc(now)
    candidates = [
        a
        for a in assignments
        if a.road_segment_id == segment.id
        and a.status == AssignmentStatus.active
        and not is_malformed(a)
        and _covers(a, now)
    ]
    if not candidates:
        return SegmentStatus(status=SegmentState.completed)

    winner = min(candidates, key=lambda a: (as_utc(a.start_at), a.id))
    return SegmentStatus(status=SegmentState.active, active_assignment=winner)
