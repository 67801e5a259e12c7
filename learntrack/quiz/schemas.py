"""Pydantic schemas for lesson quizzes."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .grading import UNANSWERED, SubmittedAnswer
from .models import QuestionResult, QuizAttempt, QuizQuestion
from .service import SubmissionResult


# ==============================================================================
# Quiz Delivery
# ==============================================================================


class QuizQuestionResponse(BaseModel):
    """Question as shown to the learner (correct answer withheld)."""

    id: UUID
    prompt: str
    answer_options: list[str]
    explanation: str | None = None
    order: int

    @classmethod
    def from_entity(cls, question: QuizQuestion) -> "QuizQuestionResponse":
        return cls(
            id=question.id,
            prompt=question.prompt,
            answer_options=question.answer_options,
            explanation=question.explanation,
            order=question.position,
        )


class QuizResponse(BaseModel):
    lesson_id: UUID
    questions: list[QuizQuestionResponse]


# ==============================================================================
# Submission
# ==============================================================================


class QuizAnswer(BaseModel):
    """Answer keyed by question id."""

    question_id: UUID
    answer_index: int | None = Field(None, ge=UNANSWERED)


class SubmitQuizRequest(BaseModel):
    """Answers in question order, or keyed by question id.

    Use -1 or null for an unanswered question.
    """

    answers: list[QuizAnswer | int | None] = Field(default_factory=list)

    def to_submitted(self) -> list[SubmittedAnswer]:
        submitted = []
        for answer in self.answers:
            if isinstance(answer, QuizAnswer):
                submitted.append(
                    SubmittedAnswer(
                        answer_index=answer.answer_index,
                        question_id=answer.question_id,
                    )
                )
            else:
                submitted.append(SubmittedAnswer(answer_index=answer))
        return submitted


class QuestionResultResponse(BaseModel):
    question_id: UUID
    order: int
    submitted_index: int | None
    correct_index: int
    is_correct: bool

    @classmethod
    def from_entity(cls, result: QuestionResult) -> "QuestionResultResponse":
        return cls(
            question_id=result.question_id,
            order=result.position,
            submitted_index=result.submitted_index,
            correct_index=result.correct_index,
            is_correct=result.is_correct,
        )


class SubmitQuizResponse(BaseModel):
    """Grading result of one submission."""

    attempt_id: UUID
    score: int
    total_questions: int
    pass_threshold: int
    passed: bool
    completion_recorded: bool
    results: list[QuestionResultResponse]

    @classmethod
    def from_result(cls, submission: SubmissionResult) -> "SubmitQuizResponse":
        return cls(
            attempt_id=submission.attempt.id,
            score=submission.grade.score,
            total_questions=submission.grade.total_questions,
            pass_threshold=submission.grade.pass_threshold,
            passed=submission.grade.passed,
            completion_recorded=submission.completion_recorded,
            results=[
                QuestionResultResponse.from_entity(r) for r in submission.grade.results
            ],
        )


# ==============================================================================
# Completion & History
# ==============================================================================


class RecentCompletionResponse(BaseModel):
    """Passing attempt inside the trailing window."""

    recently_completed: bool
    last_passed_at: datetime | None = None


class QuizAttemptResponse(BaseModel):
    id: UUID
    score: int
    total_questions: int
    passed: bool
    created_at: datetime
    results: list[QuestionResultResponse]

    @classmethod
    def from_entity(cls, attempt: QuizAttempt) -> "QuizAttemptResponse":
        return cls(
            id=attempt.id,
            score=attempt.score,
            total_questions=attempt.total_questions,
            passed=attempt.passed,
            created_at=attempt.created_at,
            results=[QuestionResultResponse.from_entity(r) for r in attempt.results],
        )


class QuizAttemptListResponse(BaseModel):
    items: list[QuizAttemptResponse]
    total: int
