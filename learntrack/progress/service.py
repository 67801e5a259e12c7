"""Learner progress service layer.

Business logic for:
- Course progress aggregation over the course -> module -> lesson graph
- Lesson completion lookups
- Idempotent lesson completion and explicit reset
"""

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog

from learntrack.catalog.models import LinkKind, sort_links
from learntrack.catalog.repository import CatalogRepository, RelationRepository
from learntrack.core.errors import (
    CourseNotFoundError,
    LessonNotFoundError,
    NotFoundError,
)

from .models import CourseProgress, LessonCompletion, LessonProgress
from .repository import ProgressRepository


logger = structlog.get_logger(__name__)

_HUNDRED = Decimal(100)


def progress_percentage(completed: int, total: int) -> int:
    """Whole-number completion percentage, rounded half up, within [0, 100]."""
    if total <= 0:
        return 0
    value = (Decimal(completed) * _HUNDRED / Decimal(total)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return max(0, min(100, int(value)))


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for learner progress tracking."""

    def __init__(
        self,
        catalog: CatalogRepository,
        relations: RelationRepository,
        progress: ProgressRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.relations = relations
        self.progress = progress
        self.clock = clock

    # ==========================================================================
    # Aggregation
    # ==========================================================================

    async def course_lesson_ids(self, course_id: UUID) -> list[UUID]:
        """Distinct lessons reachable from a course, in first-seen display order.

        A lesson linked under several modules of the course counts once.
        """
        module_links = sort_links(
            await self.relations.list_links(LinkKind.COURSE_MODULE, course_id)
        )

        seen: set[UUID] = set()
        lesson_ids: list[UUID] = []
        for module_link in module_links:
            lesson_links = sort_links(
                await self.relations.list_links(
                    LinkKind.MODULE_LESSON, module_link.child_id
                )
            )
            for lesson_link in lesson_links:
                if lesson_link.child_id not in seen:
                    seen.add(lesson_link.child_id)
                    lesson_ids.append(lesson_link.child_id)

        return lesson_ids

    async def compute_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> CourseProgress:
        """Completion statistics of a user for a course.

        Raises:
            CourseNotFoundError: If the course does not exist
            UpstreamError: On storage failure
        """
        if await self.catalog.get_course(course_id) is None:
            raise CourseNotFoundError

        lesson_ids = await self.course_lesson_ids(course_id)
        if not lesson_ids:
            return CourseProgress.empty()

        records = await self.progress.list_for_lessons(user_id, lesson_ids)
        completed = {r.lesson_id for r in records if r.completed}
        completed_ids = [lesson_id for lesson_id in lesson_ids if lesson_id in completed]

        return CourseProgress(
            total_lessons=len(lesson_ids),
            completed_lessons=len(completed_ids),
            progress_percentage=progress_percentage(len(completed_ids), len(lesson_ids)),
            completed_lesson_ids=completed_ids,
            lessons=[
                LessonCompletion(lesson_id=lesson_id, completed=lesson_id in completed)
                for lesson_id in lesson_ids
            ],
        )

    async def get_course_progress_for_learner(
        self, user_id: UUID, course_id: UUID
    ) -> CourseProgress:
        """Course progress for learner-facing views.

        Unknown courses still raise; any other failure is logged and the
        zeroed default is returned so the view keeps rendering.
        """
        try:
            return await self.compute_course_progress(user_id, course_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.exception(
                "course_progress_degraded",
                user_id=str(user_id),
                course_id=str(course_id),
                error=str(e),
            )
            return CourseProgress.empty()

    async def compute_lesson_progress(
        self, user_id: UUID, lesson_id: UUID
    ) -> LessonCompletion:
        """Point lookup; lessons without a record are not completed."""
        record = await self.progress.get(user_id, lesson_id)
        return LessonCompletion(
            lesson_id=lesson_id,
            completed=bool(record and record.completed),
        )

    # ==========================================================================
    # Completion
    # ==========================================================================

    async def mark_lesson_complete(
        self, user_id: UUID, lesson_id: UUID
    ) -> LessonProgress:
        """Mark a lesson completed. Repeated calls keep it completed.

        Raises:
            LessonNotFoundError: If the lesson does not exist
            UpstreamError: On storage failure
        """
        if await self.catalog.get_lesson(lesson_id) is None:
            raise LessonNotFoundError
        return await self.record_completion(user_id, lesson_id)

    async def record_completion(self, user_id: UUID, lesson_id: UUID) -> LessonProgress:
        """Upsert completed = true for an already validated lesson.

        started_at is kept from the first record and completed_at from the
        first completion.
        """
        now = self.clock()
        existing = await self.progress.get(user_id, lesson_id)

        already_completed = existing is not None and existing.completed
        progress = LessonProgress(
            user_id=user_id,
            lesson_id=lesson_id,
            completed=True,
            started_at=(existing.started_at if existing else None) or now,
            completed_at=(existing.completed_at if already_completed else None) or now,
            updated_at=now,
        )
        await self.progress.mark_completed(progress)

        logger.info(
            "lesson_marked_complete",
            user_id=str(user_id),
            lesson_id=str(lesson_id),
            first_completion=not already_completed,
        )
        return progress

    async def reset_lesson_progress(
        self, user_id: UUID, lesson_id: UUID
    ) -> LessonProgress:
        """Explicitly set a lesson back to not completed.

        Raises:
            LessonNotFoundError: If the lesson does not exist
        """
        if await self.catalog.get_lesson(lesson_id) is None:
            raise LessonNotFoundError

        now = self.clock()
        existing = await self.progress.get(user_id, lesson_id)
        await self.progress.reset(user_id, lesson_id, now)

        logger.info(
            "lesson_progress_reset",
            user_id=str(user_id),
            lesson_id=str(lesson_id),
        )
        return LessonProgress(
            user_id=user_id,
            lesson_id=lesson_id,
            completed=False,
            started_at=existing.started_at if existing else None,
            completed_at=None,
            updated_at=now,
        )
