"""Lesson quiz API endpoints.

Provides routes for:
- Fetching a lesson's quiz (without correct answers)
- Submitting answers for grading
- The recently-passed signal and attempt history
"""

from uuid import UUID

from fastapi import APIRouter, status

from learntrack.auth.dependencies import CurrentUser
from learntrack.core.errors import LearntrackError, handle_error

from .dependencies import QuizServiceDep
from .schemas import (
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizQuestionResponse,
    QuizResponse,
    RecentCompletionResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
)


router = APIRouter(prefix="/v1/lessons", tags=["quiz"])


@router.get(
    "/{lesson_id}/quiz",
    response_model=QuizResponse,
    summary="Get lesson quiz",
)
async def get_quiz(
    lesson_id: UUID,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> QuizResponse:
    """Ordered questions of a lesson, correct answers withheld."""
    try:
        questions = await quiz_service.get_quiz(lesson_id)
    except LearntrackError as e:
        raise handle_error(e) from e

    return QuizResponse(
        lesson_id=lesson_id,
        questions=[QuizQuestionResponse.from_entity(q) for q in questions],
    )


@router.post(
    "/{lesson_id}/quiz/attempts",
    response_model=SubmitQuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit quiz answers",
)
async def submit_quiz(
    lesson_id: UUID,
    data: SubmitQuizRequest,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> SubmitQuizResponse:
    """Grade the answers and record the attempt.

    A passing attempt also marks the lesson complete; `completion_recorded`
    is false when that write failed.
    """
    try:
        submission = await quiz_service.submit_quiz(
            user.id, lesson_id, data.to_submitted()
        )
    except LearntrackError as e:
        raise handle_error(e) from e

    return SubmitQuizResponse.from_result(submission)


@router.get(
    "/{lesson_id}/quiz/completion",
    response_model=RecentCompletionResponse,
    summary="Check recent quiz pass",
)
async def get_recent_completion(
    lesson_id: UUID,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> RecentCompletionResponse:
    """Whether the caller passed this quiz within the trailing window."""
    try:
        attempt = await quiz_service.last_recent_pass(user.id, lesson_id)
    except LearntrackError as e:
        raise handle_error(e) from e

    return RecentCompletionResponse(
        recently_completed=attempt is not None,
        last_passed_at=attempt.created_at if attempt else None,
    )


@router.get(
    "/{lesson_id}/quiz/attempts",
    response_model=QuizAttemptListResponse,
    summary="List quiz attempts",
)
async def list_attempts(
    lesson_id: UUID,
    quiz_service: QuizServiceDep,
    user: CurrentUser,
) -> QuizAttemptListResponse:
    """Attempt history of the caller, newest first."""
    try:
        attempts = await quiz_service.list_attempts(user.id, lesson_id)
    except LearntrackError as e:
        raise handle_error(e) from e

    return QuizAttemptListResponse(
        items=[QuizAttemptResponse.from_entity(a) for a in attempts],
        total=len(attempts),
    )
