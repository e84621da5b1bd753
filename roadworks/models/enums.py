#roadworks/models/enums.py
from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    admin = "admin"
    contractor = "contractor"
    other = "other"


class AssignmentStatus(str, Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class SegmentState(str, Enum):
    # derived, never stored
    active = "active"
    completed = "completed"


class ActivityAction:
    NOTE = "NOTE"

    MILESTONE_CREATED = "MILESTONE_CREATED"

    SEGMENT_CREATED = "SEGMENT_CREATED"

    ASSIGNMENT_CREATED = "ASSIGNMENT_CREATED"
    ASSIGNMENT_STATUS_CHANGED = "ASSIGNMENT_STATUS_CHANGED"

    MEMBER_ADDED = "MEMBER_ADDED"
    MEMBER_REMOVED = "MEMBER_REMOVED"

    PROJECT_STATUS_CHANGED = "PROJECT_STATUS_CHANGED"


class NotificationType(str, Enum):
    system = "system"
    milestone = "milestone"
    assignment = "assignment"
