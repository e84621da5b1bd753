from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import String, DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roadworks.db.base import Base, JSONType


class ActivityEntry(Base):
    """
    Project activity feed record.
    - Append-only (never UPDATE)
    - created_at is assigned by ActivityStore, not by the database
    """
    __tablename__ = "activity_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    project_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    actor_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Optional related entity (currently milestones only)
    milestone_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("milestones.id"), nullable=True
    )

    # What happened
    action: Mapped[str] = mapped_column(String(96), nullable=False)  # e.g., MILESTONE_CREATED
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    details_json: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    actor = relationship("User")
    milestone = relationship("Milestone")

    __table_args__ = (
        Index("ix_activity_project_created", "project_id", "created_at", "id"),
    )
