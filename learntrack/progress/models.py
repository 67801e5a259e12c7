"""Database models for learner progress.

Cassandra table definitions for:
- Lesson progress: completion flag per (user, lesson)

Course-level progress is never stored; it is aggregated on read from the
catalog junction tables and lesson_progress.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from learntrack.catalog.models import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition key: user_id, so one query covers every lesson of a course
LESSON_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress (
    user_id UUID,
    lesson_id UUID,
    completed BOOLEAN,
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (user_id, lesson_id)
)
"""

PROGRESS_TABLES_CQL = [
    LESSON_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class LessonProgress:
    """Lesson progress entity for a specific user.

    Attributes:
        user_id: User UUID
        lesson_id: Lesson UUID
        completed: Completion flag; only an explicit reset sets it back to False
        started_at: First progress signal
        completed_at: First completion (kept on repeated completions)
        updated_at: Last write
    """

    def __init__(
        self,
        user_id: UUID,
        lesson_id: UUID,
        completed: bool = False,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.lesson_id = lesson_id
        self.completed = completed
        self.started_at = ensure_utc_aware(started_at)
        self.completed_at = ensure_utc_aware(completed_at)
        self.updated_at = ensure_utc_aware(updated_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "LessonProgress":
        """Create LessonProgress instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            lesson_id=row.lesson_id,
            completed=bool(row.completed),
            started_at=row.started_at,
            completed_at=row.completed_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "lesson_id": self.lesson_id,
            "completed": self.completed,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return (
            f"<LessonProgress user={self.user_id} lesson={self.lesson_id} "
            f"completed={self.completed}>"
        )


# ==============================================================================
# Aggregates
# ==============================================================================


@dataclass
class LessonCompletion:
    lesson_id: UUID
    completed: bool


@dataclass
class CourseProgress:
    """Per-user completion statistics for one course."""

    total_lessons: int = 0
    completed_lessons: int = 0
    progress_percentage: int = 0
    completed_lesson_ids: list[UUID] = field(default_factory=list)
    lessons: list[LessonCompletion] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "CourseProgress":
        return cls()
