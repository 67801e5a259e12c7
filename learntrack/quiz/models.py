"""Database models for lesson quizzes.

Cassandra table definitions for:
- Quiz questions: ordered per lesson, answer options as list<text>
- Quiz attempts: append-only audit trail per (user, lesson)

The per-question breakdown of an attempt is stored as JSON text and is
only ever encoded/decoded through RESULTS_ADAPTER.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from cassandra.util import uuid_from_time
from pydantic import TypeAdapter

from learntrack.catalog.models import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Clustering by position keeps questions in display order
QUIZ_QUESTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_questions (
    lesson_id UUID,
    position INT,
    id UUID,
    prompt TEXT,
    answer_options LIST<TEXT>,
    correct_index INT,
    explanation TEXT,
    PRIMARY KEY (lesson_id, position, id)
) WITH CLUSTERING ORDER BY (position ASC, id ASC)
"""

# Append-only; newest attempt first within a (user, lesson) partition
QUIZ_ATTEMPTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts (
    user_id UUID,
    lesson_id UUID,
    created_at TIMESTAMP,
    id TIMEUUID,
    score INT,
    total_questions INT,
    passed BOOLEAN,
    results TEXT,
    PRIMARY KEY ((user_id, lesson_id), created_at, id)
) WITH CLUSTERING ORDER BY (created_at DESC, id ASC)
"""

QUIZ_TABLES_CQL = [
    QUIZ_QUESTIONS_TABLE_CQL,
    QUIZ_ATTEMPTS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class QuizQuestion:
    """Quiz question of a lesson.

    Attributes:
        id: Question UUID
        lesson_id: Owning lesson
        position: Display order within the quiz
        prompt: Question text
        answer_options: Choices shown to the learner
        correct_index: Index into answer_options of the right choice
        explanation: Shown after grading (optional)
    """

    def __init__(
        self,
        id: UUID,
        lesson_id: UUID,
        position: int,
        prompt: str,
        answer_options: list[str],
        correct_index: int,
        explanation: str | None = None,
    ):
        self.id = id
        self.lesson_id = lesson_id
        self.position = position
        self.prompt = prompt
        self.answer_options = list(answer_options)
        self.correct_index = correct_index
        self.explanation = explanation

    @classmethod
    def from_row(cls, row: Any) -> "QuizQuestion":
        """Create QuizQuestion instance from Cassandra row."""
        return cls(
            id=row.id,
            lesson_id=row.lesson_id,
            position=row.position,
            prompt=row.prompt or "",
            answer_options=list(row.answer_options or []),
            correct_index=row.correct_index,
            explanation=row.explanation,
        )

    def __repr__(self) -> str:
        return f"<QuizQuestion lesson={self.lesson_id} pos={self.position}>"


@dataclass(frozen=True)
class QuestionResult:
    """Grading outcome of a single question."""

    question_id: UUID
    position: int
    submitted_index: int | None
    correct_index: int
    is_correct: bool


RESULTS_ADAPTER = TypeAdapter(list[QuestionResult])


def encode_results(results: list[QuestionResult]) -> str:
    return RESULTS_ADAPTER.dump_json(results).decode("utf-8")


def decode_results(raw: str | None) -> list[QuestionResult]:
    if not raw:
        return []
    return RESULTS_ADAPTER.validate_json(raw)


class QuizAttempt:
    """Immutable record of one graded submission.

    Attributes:
        id: Time-based UUID derived from created_at
        user_id: Learner UUID
        lesson_id: Lesson UUID
        score: Correct answers
        total_questions: Questions graded
        passed: Whether score reached the pass threshold
        results: Per-question breakdown
        created_at: Submission time
    """

    def __init__(
        self,
        user_id: UUID,
        lesson_id: UUID,
        score: int,
        total_questions: int,
        passed: bool,
        results: list[QuestionResult],
        created_at: datetime | None = None,
        id: UUID | None = None,
    ):
        self.user_id = user_id
        self.lesson_id = lesson_id
        self.score = score
        self.total_questions = total_questions
        self.passed = passed
        self.results = list(results)
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.id = id or uuid_from_time(self.created_at)

    @classmethod
    def from_row(cls, row: Any) -> "QuizAttempt":
        """Create QuizAttempt instance from Cassandra row."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            lesson_id=row.lesson_id,
            score=row.score,
            total_questions=row.total_questions,
            passed=bool(row.passed),
            results=decode_results(row.results),
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return (
            f"<QuizAttempt {self.id} score={self.score}/{self.total_questions} "
            f"passed={self.passed}>"
        )
