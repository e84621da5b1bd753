from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import and_, asc, desc, func, or_, select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, joinedload

from roadworks.core.clock import MonotonicClock, as_utc
from roadworks.core.errors import StorageUnavailable
from roadworks.models.activity_entry import ActivityEntry
from roadworks.models.enums import ActivityAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityDraft:
    project_id: uuid.UUID
    actor_id: uuid.UUID
    summary: str
    action: str = ActivityAction.NOTE
    milestone_id: Optional[uuid.UUID] = None
    details: Dict[str, Any] = field(default_factory=dict)


def _is_storage_outage(exc: DBAPIError) -> bool:
    return isinstance(exc, (OperationalError, InterfaceError)) or exc.connection_invalidated


def _storage_unavailable(db: Session, exc: Exception, op: str) -> StorageUnavailable:
    db.rollback()
    logger.error("activity store unavailable", extra={"operation": op, "error": str(exc)})
    return StorageUnavailable(f"Activity store unavailable during {op}.")


@contextmanager
def _guarded(db: Session, op: str) -> Iterator[None]:
    try:
        yield
    except DBAPIError as e:
        if _is_storage_outage(e):
            raise _storage_unavailable(db, e, op) from e
        raise
    except PoolTimeoutError as e:
        raise _storage_unavailable(db, e, op) from e


class ActivityStore:
    """
    Append-only project activity log.

    Timestamps come from one MonotonicClock shared by ``append`` and
    ``snapshot``: an append that starts after a snapshot always gets a
    strictly later timestamp.
    """

    def __init__(self, clock: Optional[MonotonicClock] = None):
        self.clock = clock or MonotonicClock()

    # ---------------------------
    # WRITES
    # ---------------------------

    def append(self, db: Session, draft: ActivityDraft) -> ActivityEntry:
        row = ActivityEntry(
            id=uuid.uuid4(),
            project_id=draft.project_id,
            actor_id=draft.actor_id,
            milestone_id=draft.milestone_id,
            action=draft.action,
            summary=draft.summary,
            details_json=dict(draft.details),
            created_at=self.clock.now(),
        )
        with _guarded(db, "append"):
            db.add(row)
            db.commit()
            db.refresh(row)

        logger.info(
            "activity appended",
            extra={"project_id": str(row.project_id), "entry_id": str(row.id), "action": row.action},
        )
        return row

    # ---------------------------
    # READS
    # ---------------------------

    def snapshot(self, db: Session, project_id: uuid.UUID) -> Optional[datetime]:
        """
        Newest timestamp the project's log holds right now, capped at the
        server clock reading. ``None`` when the project has no entries.

        The value only moves when something is appended, so repeated polls
        over an unchanged log are served the same cursor.
        """
        served_at = self.clock.now()
        stmt = select(func.max(ActivityEntry.created_at)).where(ActivityEntry.project_id == project_id)
        with _guarded(db, "snapshot"):
            newest = db.execute(stmt).scalar()
        if newest is None:
            return None
        return min(as_utc(newest), served_at)

    def _base_query(self, project_id: uuid.UUID):
        return (
            select(ActivityEntry)
            .options(joinedload(ActivityEntry.actor), joinedload(ActivityEntry.milestone))
            .where(ActivityEntry.project_id == project_id)
        )

    def _run(self, db: Session, stmt, op: str) -> List[ActivityEntry]:
        with _guarded(db, op):
            return list(db.execute(stmt).scalars().all())

    def query_after(
        self,
        db: Session,
        project_id: uuid.UUID,
        cursor: Optional[datetime] = None,
        limit: Optional[int] = None,
        after_id: Optional[uuid.UUID] = None,
    ) -> List[ActivityEntry]:
        """
        Entries of the project created strictly after ``cursor``, newest first.

        ``cursor=None`` means from the epoch. ``after_id`` makes the position
        ``(cursor, after_id)``: entries stamped exactly ``cursor`` are still
        returned when their id sorts after it. With ``limit`` the *oldest*
        ``limit`` entries past that position are taken (still returned newest
        first) so a caller can walk forward without skipping anything.
        """
        stmt = self._base_query(project_id)
        if cursor is not None:
            cursor = as_utc(cursor)
            after = ActivityEntry.created_at > cursor
            if after_id is not None:
                after = or_(after, and_(ActivityEntry.created_at == cursor, ActivityEntry.id > after_id))
            stmt = stmt.where(after)

        if limit is None:
            stmt = stmt.order_by(desc(ActivityEntry.created_at), desc(ActivityEntry.id))
            return self._run(db, stmt, "query_after")

        stmt = stmt.order_by(asc(ActivityEntry.created_at), asc(ActivityEntry.id)).limit(limit)
        rows = self._run(db, stmt, "query_after")
        rows.reverse()
        return rows

    def list_page(
        self,
        db: Session,
        project_id: uuid.UUID,
        *,
        page: int,
        page_size: int,
    ) -> Tuple[List[ActivityEntry], bool]:
        """History view: newest first, ``page`` is 1-based. Returns (rows, has_more)."""
        stmt = (
            self._base_query(project_id)
            .order_by(desc(ActivityEntry.created_at), desc(ActivityEntry.id))
            .offset((page - 1) * page_size)
            .limit(page_size + 1)
        )
        rows = self._run(db, stmt, "list_page")
        has_more = len(rows) > page_size
        return rows[:page_size], has_more


activity_store = ActivityStore()


def get_activity_store() -> ActivityStore:
    return activity_store
