from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from roadworks.core.clock import as_utc
from roadworks.core.errors import Forbidden, NotFound
from roadworks.models.activity_entry import ActivityEntry
from roadworks.models.project import Project
from roadworks.policies.activity_policy import can_read_activity
from roadworks.policies.rbac import Caller, require_caller
from roadworks.services.activity_store import ActivityStore

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FeedPage:
    entries: List[ActivityEntry]
    next_cursor: datetime
    has_more: bool = False
    # set only when the window was truncated
    next_after_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class HistoryPage:
    entries: List[ActivityEntry]
    page: int
    has_more: bool


class ChangeFeedPoller:
    """
    Incremental activity feed.

    ``next_cursor`` is the store snapshot taken *before* the query, not the
    newest returned entry's timestamp. Polling again from it can re-deliver
    entries sharing the boundary timestamp (clients dedupe by id) but never
    skips one that was in the store when the query ran. With nothing
    appended in between, the same poll is answered with the same cursor.

    With ``poll_limit`` set, a truncated window resumes from the position
    ``(next_cursor, next_after_id)`` of the newest entry it returned.
    """

    def __init__(self, store: ActivityStore, poll_limit: Optional[int] = None, page_size: int = 20):
        if poll_limit is not None and poll_limit < 1:
            raise ValueError("poll_limit must be a positive integer or None")
        self.store = store
        self.poll_limit = poll_limit
        self.page_size = page_size

    def _authorize(self, db: Session, caller: Optional[Caller], project_id: uuid.UUID) -> Caller:
        caller = require_caller(caller)
        if not can_read_activity(db, caller, project_id):
            # same answer for "not a member" and "no such project"
            raise Forbidden("Not authorized to view this project's activity.")
        if caller.is_admin and db.get(Project, project_id) is None:
            raise NotFound("Project not found.")
        return caller

    def poll(
        self,
        db: Session,
        caller: Optional[Caller],
        project_id: uuid.UUID,
        cursor: Optional[datetime] = None,
        after_id: Optional[uuid.UUID] = None,
    ) -> FeedPage:
        caller = self._authorize(db, caller, project_id)
        if cursor is not None:
            cursor = as_utc(cursor)

        served_at = self.store.snapshot(db, project_id)
        limit = None if self.poll_limit is None else self.poll_limit + 1
        entries = self.store.query_after(db, project_id, cursor, limit=limit, after_id=after_id)

        has_more = self.poll_limit is not None and len(entries) > self.poll_limit
        if has_more:
            # entries are newest first: drop the one fetched past the limit
            entries = entries[1:]
            newest = entries[0]
            next_cursor = as_utc(newest.created_at)
            next_after_id = newest.id
        else:
            next_cursor = max(t for t in (served_at, cursor, EPOCH) if t is not None)
            next_after_id = None

        logger.debug(
            "activity poll served",
            extra={
                "project_id": str(project_id),
                "caller_id": str(caller.id),
                "cursor": cursor.isoformat() if cursor else None,
                "entries": len(entries),
                "has_more": has_more,
            },
        )
        return FeedPage(entries=entries, next_cursor=next_cursor, has_more=has_more, next_after_id=next_after_id)

    def history(
        self,
        db: Session,
        caller: Optional[Caller],
        project_id: uuid.UUID,
        page: int = 1,
    ) -> HistoryPage:
        self._authorize(db, caller, project_id)
        rows, has_more = self.store.list_page(db, project_id, page=page, page_size=self.page_size)
        return HistoryPage(entries=rows, page=page, has_more=has_more)
