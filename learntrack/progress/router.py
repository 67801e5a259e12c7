"""Learner progress API endpoints.

Provides routes for:
- Course progress (aggregated over the catalog graph)
- Lesson progress lookups
- Manual lesson completion
- Admin reset of a learner's lesson completion
"""

from uuid import UUID

from fastapi import APIRouter

from learntrack.auth.dependencies import AdminUser, CurrentUser
from learntrack.core.errors import LearntrackError, handle_error

from .dependencies import ProgressServiceDep
from .schemas import (
    CourseProgressResponse,
    LessonCompletionResponse,
    LessonProgressResponse,
)


router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Get course progress",
)
async def get_course_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> CourseProgressResponse:
    """Completion statistics of the caller for a course.

    Returns zeros instead of failing when progress cannot be computed.
    """
    try:
        progress = await progress_service.get_course_progress_for_learner(
            user.id, course_id
        )
        return CourseProgressResponse.from_entity(progress)
    except LearntrackError as e:
        raise handle_error(e) from e


@router.get(
    "/lessons/{lesson_id}",
    response_model=LessonCompletionResponse,
    summary="Get lesson progress",
)
async def get_lesson_progress(
    lesson_id: UUID,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> LessonCompletionResponse:
    """Whether the caller completed a lesson."""
    try:
        completion = await progress_service.compute_lesson_progress(user.id, lesson_id)
        return LessonCompletionResponse(completed=completion.completed)
    except LearntrackError as e:
        raise handle_error(e) from e


@router.post(
    "/lessons/{lesson_id}/complete",
    response_model=LessonProgressResponse,
    summary="Mark lesson as complete",
)
async def mark_lesson_complete(
    lesson_id: UUID,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> LessonProgressResponse:
    """Mark a lesson complete. Safe to repeat."""
    try:
        progress = await progress_service.mark_lesson_complete(user.id, lesson_id)
        return LessonProgressResponse.from_entity(progress)
    except LearntrackError as e:
        raise handle_error(e) from e


@router.post(
    "/users/{user_id}/lessons/{lesson_id}/reset",
    response_model=LessonProgressResponse,
    summary="Reset a learner's lesson progress",
)
async def reset_lesson_progress(
    user_id: UUID,
    lesson_id: UUID,
    progress_service: ProgressServiceDep,
    admin: AdminUser,
) -> LessonProgressResponse:
    """Set a learner's lesson back to not completed. Admin only."""
    try:
        progress = await progress_service.reset_lesson_progress(user_id, lesson_id)
        return LessonProgressResponse.from_entity(progress)
    except LearntrackError as e:
        raise handle_error(e) from e
