"""Quiz service layer.

Business logic for:
- Serving a lesson's quiz without the correct answers
- Grading submissions and recording the attempt
- Completing the lesson when a submission passes
- The time-bounded "recently passed" signal and the attempt history

The recently-passed signal is read from attempts only. It is independent
of the permanent completion flag kept in lesson progress.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog

from learntrack.catalog.repository import CatalogRepository
from learntrack.core.errors import LessonNotFoundError, NotFoundError
from learntrack.progress.service import ProgressService

from .grading import DEFAULT_PASS_RATIO, GradeResult, SubmittedAnswer, grade
from .models import QuizAttempt, QuizQuestion
from .repository import QuizRepository


logger = structlog.get_logger(__name__)

DEFAULT_RECENT_WINDOW = timedelta(hours=24)


class NoQuestionsError(NotFoundError):
    """Lesson has no quiz questions."""

    def __init__(self, message: str = "Lesson has no quiz questions"):
        super().__init__(message, "no_questions")


@dataclass
class SubmissionResult:
    attempt: QuizAttempt
    grade: GradeResult
    completion_recorded: bool


def _utcnow() -> datetime:
    return datetime.now(UTC)


class QuizService:
    """Service for quiz delivery and grading."""

    def __init__(
        self,
        catalog: CatalogRepository,
        quizzes: QuizRepository,
        progress_service: ProgressService,
        pass_ratio: float = DEFAULT_PASS_RATIO,
        recent_window: timedelta = DEFAULT_RECENT_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.quizzes = quizzes
        self.progress_service = progress_service
        self.pass_ratio = pass_ratio
        self.recent_window = recent_window
        self.clock = clock

    async def get_quiz(self, lesson_id: UUID) -> list[QuizQuestion]:
        """Questions of a lesson in display order.

        Raises:
            LessonNotFoundError: If the lesson does not exist
            NoQuestionsError: If the lesson has no questions
        """
        if await self.catalog.get_lesson(lesson_id) is None:
            raise LessonNotFoundError

        questions = await self.quizzes.list_questions(lesson_id)
        if not questions:
            raise NoQuestionsError
        return questions

    async def submit_quiz(
        self,
        user_id: UUID,
        lesson_id: UUID,
        answers: Sequence[SubmittedAnswer],
    ) -> SubmissionResult:
        """Grade a submission, record the attempt and complete on pass.

        Everything up to the attempt insert is fatal to the call. A failed
        completion write after a recorded attempt is logged and reported
        through `completion_recorded`, the grade still stands.

        Raises:
            LessonNotFoundError: If the lesson does not exist
            NoQuestionsError: If the lesson has no questions
            ValidationError: If answers cannot be paired with questions
            UpstreamError: If the attempt cannot be stored
        """
        questions = await self.get_quiz(lesson_id)
        result = grade(questions, answers, self.pass_ratio)

        attempt = QuizAttempt(
            user_id=user_id,
            lesson_id=lesson_id,
            score=result.score,
            total_questions=result.total_questions,
            passed=result.passed,
            results=result.results,
            created_at=self.clock(),
        )
        await self.quizzes.insert_attempt(attempt)

        logger.info(
            "quiz_submitted",
            user_id=str(user_id),
            lesson_id=str(lesson_id),
            attempt_id=str(attempt.id),
            score=result.score,
            total_questions=result.total_questions,
            passed=result.passed,
        )

        completion_recorded = False
        if result.passed:
            try:
                await self.progress_service.record_completion(user_id, lesson_id)
                completion_recorded = True
            except Exception as e:
                logger.exception(
                    "completion_side_effect_failed",
                    user_id=str(user_id),
                    lesson_id=str(lesson_id),
                    attempt_id=str(attempt.id),
                    error=str(e),
                )

        return SubmissionResult(
            attempt=attempt,
            grade=result,
            completion_recorded=completion_recorded,
        )

    async def last_recent_pass(
        self, user_id: UUID, lesson_id: UUID, now: datetime | None = None
    ) -> QuizAttempt | None:
        """Newest passing attempt inside the trailing window, if any."""
        since = (now or self.clock()) - self.recent_window
        attempts = await self.quizzes.list_attempts_since(user_id, lesson_id, since)
        passing = [a for a in attempts if a.passed and a.created_at >= since]
        return max(passing, key=lambda a: a.created_at, default=None)

    async def is_recently_completed(
        self, user_id: UUID, lesson_id: UUID, now: datetime | None = None
    ) -> bool:
        """Whether a passing attempt exists within the trailing window."""
        return await self.last_recent_pass(user_id, lesson_id, now) is not None

    async def list_attempts(self, user_id: UUID, lesson_id: UUID) -> list[QuizAttempt]:
        """Attempt history of a user for a lesson, newest first."""
        attempts = await self.quizzes.list_attempts(user_id, lesson_id)
        return sorted(attempts, key=lambda a: a.created_at, reverse=True)
