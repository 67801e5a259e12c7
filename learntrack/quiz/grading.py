"""Quiz grading.

Pure functions: no storage and no clock, so a grade is fully determined
by the questions and the submitted answers.

Answers are paired with questions by position. When every answer names
its question, they are paired by question id instead, which stays correct
if the quiz was reordered between fetch and submit. Unanswered questions
(missing, null or -1) score as incorrect.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from learntrack.core.errors import ValidationError

from .models import QuestionResult, QuizQuestion


DEFAULT_PASS_RATIO = 0.7

UNANSWERED = -1


@dataclass(frozen=True)
class SubmittedAnswer:
    answer_index: int | None
    question_id: UUID | None = None


@dataclass
class GradeResult:
    score: int
    total_questions: int
    pass_threshold: int
    passed: bool
    results: list[QuestionResult] = field(default_factory=list)


def pass_threshold(total_questions: int, ratio: float = DEFAULT_PASS_RATIO) -> int:
    """Minimum score to pass: ceil(total * ratio), computed exactly.

    >>> pass_threshold(10)
    7
    >>> pass_threshold(3)
    3
    """
    return math.ceil(Decimal(total_questions) * Decimal(str(ratio)))


def _normalize(index: int | None) -> int | None:
    if index is None or index < 0:
        return None
    return index


def pair_answers(
    questions: Sequence[QuizQuestion],
    answers: Sequence[SubmittedAnswer],
) -> list[int | None]:
    """Submitted option index for each question, None where unanswered.

    Answers are paired by question id when they all carry one, by position
    when none do.

    Raises:
        ValidationError: On a mix of keyed and positional answers, on more
            positional answers than questions, or on unknown or repeated
            question ids
    """
    keyed = sum(a.question_id is not None for a in answers)
    if 0 < keyed < len(answers):
        msg = "Answers must all carry a question_id or none may"
        raise ValidationError(msg)

    if keyed:
        known = {q.id for q in questions}
        by_question: dict[UUID, int | None] = {}
        for answer in answers:
            if answer.question_id not in known:
                msg = f"Unknown question id: {answer.question_id}"
                raise ValidationError(msg)
            if answer.question_id in by_question:
                msg = f"Question answered more than once: {answer.question_id}"
                raise ValidationError(msg)
            by_question[answer.question_id] = _normalize(answer.answer_index)
        return [by_question.get(q.id) for q in questions]

    if len(answers) > len(questions):
        msg = (
            f"Received {len(answers)} answers for {len(questions)} questions"
        )
        raise ValidationError(msg)

    paired = [_normalize(a.answer_index) for a in answers]
    return paired + [None] * (len(questions) - len(paired))


def grade(
    questions: Sequence[QuizQuestion],
    answers: Sequence[SubmittedAnswer],
    ratio: float = DEFAULT_PASS_RATIO,
) -> GradeResult:
    """Score answers against questions already sorted by position."""
    submitted = pair_answers(questions, answers)

    results: list[QuestionResult] = []
    for question, index in zip(questions, submitted, strict=True):
        results.append(
            QuestionResult(
                question_id=question.id,
                position=question.position,
                submitted_index=index,
                correct_index=question.correct_index,
                is_correct=index is not None and index == question.correct_index,
            )
        )

    score = sum(1 for r in results if r.is_correct)
    threshold = pass_threshold(len(questions), ratio)
    return GradeResult(
        score=score,
        total_questions=len(questions),
        pass_threshold=threshold,
        passed=score >= threshold,
        results=results,
    )
