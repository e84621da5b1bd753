from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, ForeignKey, Index, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roadworks.db.base import Base


class Assignment(Base):
    """
    A contractor scheduled on a road segment for [start_at, end_at].
    - Never deleted (historical record); only status moves.
    """
    __tablename__ = "assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    road_segment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("road_segments.id"), nullable=False
    )
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default=text("'active'"), doc="active | completed | cancelled"
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    road_segment = relationship("RoadSegment", back_populates="assignments")
    contractor = relationship("User")

    __table_args__ = (
        Index("ix_assignments_window", "road_segment_id", "status", "start_at", "end_at"),
        Index("ix_assignments_contractor", "contractor_id"),
    )
