"""Cassandra access for lesson progress records."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from learntrack.core.errors import storage_errors

from .models import LessonProgress


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProgressRepository:
    """Reads and upserts lesson_progress rows.

    Completion writes always set the literal `completed = true`, so
    concurrent writers on that path can only converge on true.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE user_id = ? AND lesson_id = ?
        """)

        self._get_progress_for_lessons = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE user_id = ? AND lesson_id IN ?
        """)

        self._mark_completed = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_progress
            SET completed = true, started_at = ?, completed_at = ?, updated_at = ?
            WHERE user_id = ? AND lesson_id = ?
        """)

        self._reset_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_progress
            SET completed = false, completed_at = null, updated_at = ?
            WHERE user_id = ? AND lesson_id = ?
        """)

    async def get(self, user_id: UUID, lesson_id: UUID) -> LessonProgress | None:
        with storage_errors("get_lesson_progress"):
            rows = await self.session.aexecute(self._get_progress, [user_id, lesson_id])
        row = rows.one()
        return LessonProgress.from_row(row) if row else None

    async def list_for_lessons(
        self, user_id: UUID, lesson_ids: list[UUID]
    ) -> list[LessonProgress]:
        """Progress rows of a user restricted to the given lessons."""
        if not lesson_ids:
            return []
        with storage_errors("list_lesson_progress"):
            rows = await self.session.aexecute(
                self._get_progress_for_lessons, [user_id, list(lesson_ids)]
            )
        return [LessonProgress.from_row(row) for row in rows]

    async def mark_completed(self, progress: LessonProgress) -> LessonProgress:
        """Upsert a completed record keeping the given timestamps."""
        with storage_errors("mark_lesson_completed"):
            await self.session.aexecute(
                self._mark_completed,
                [
                    progress.started_at,
                    progress.completed_at,
                    progress.updated_at,
                    progress.user_id,
                    progress.lesson_id,
                ],
            )
        return progress

    async def reset(self, user_id: UUID, lesson_id: UUID, now: datetime) -> None:
        with storage_errors("reset_lesson_progress"):
            await self.session.aexecute(self._reset_progress, [now, user_id, lesson_id])
