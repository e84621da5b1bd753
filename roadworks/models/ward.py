from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import String, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roadworks.db.base import Base


class Ward(Base):
    __tablename__ = "wards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
