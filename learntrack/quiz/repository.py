"""Cassandra access for quiz questions and attempts."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from learntrack.core.errors import storage_errors

from .models import QuizAttempt, QuizQuestion, encode_results


if TYPE_CHECKING:
    from cassandra.cluster import Session


class QuizRepository:
    """Reads quiz questions and appends quiz attempts.

    Attempts are inserted once and never updated or deleted.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._list_questions = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_questions WHERE lesson_id = ?
        """)

        self._insert_attempt = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts
            (user_id, lesson_id, created_at, id, score, total_questions,
             passed, results)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._list_attempts = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts
            WHERE user_id = ? AND lesson_id = ?
            LIMIT ?
        """)

        self._list_attempts_since = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts
            WHERE user_id = ? AND lesson_id = ? AND created_at >= ?
        """)

    async def list_questions(self, lesson_id: UUID) -> list[QuizQuestion]:
        """Questions of a lesson in display order."""
        with storage_errors("list_quiz_questions"):
            rows = await self.session.aexecute(self._list_questions, [lesson_id])
        questions = [QuizQuestion.from_row(row) for row in rows]
        return sorted(questions, key=lambda q: (q.position, str(q.id)))

    async def insert_attempt(self, attempt: QuizAttempt) -> QuizAttempt:
        with storage_errors("insert_quiz_attempt"):
            await self.session.aexecute(
                self._insert_attempt,
                [
                    attempt.user_id,
                    attempt.lesson_id,
                    attempt.created_at,
                    attempt.id,
                    attempt.score,
                    attempt.total_questions,
                    attempt.passed,
                    encode_results(attempt.results),
                ],
            )
        return attempt

    async def list_attempts(
        self, user_id: UUID, lesson_id: UUID, limit: int = 50
    ) -> list[QuizAttempt]:
        """Attempts of a user for a lesson, newest first."""
        with storage_errors("list_quiz_attempts"):
            rows = await self.session.aexecute(
                self._list_attempts, [user_id, lesson_id, limit]
            )
        return [QuizAttempt.from_row(row) for row in rows]

    async def list_attempts_since(
        self, user_id: UUID, lesson_id: UUID, since: datetime
    ) -> list[QuizAttempt]:
        """Attempts created at or after `since`, newest first."""
        with storage_errors("list_recent_quiz_attempts"):
            rows = await self.session.aexecute(
                self._list_attempts_since, [user_id, lesson_id, since]
            )
        return [QuizAttempt.from_row(row) for row in rows]
