"""Pydantic schemas for learner progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import CourseProgress, LessonProgress


class LessonCompletionSummary(BaseModel):
    lesson_id: UUID
    completed: bool


class CourseProgressResponse(BaseModel):
    """Aggregated progress of the caller in a course."""

    total_lessons: int = Field(..., ge=0)
    completed_lessons: int = Field(..., ge=0)
    progress_percentage: int = Field(..., ge=0, le=100)
    lessons: list[LessonCompletionSummary] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, progress: CourseProgress) -> "CourseProgressResponse":
        return cls(
            total_lessons=progress.total_lessons,
            completed_lessons=progress.completed_lessons,
            progress_percentage=progress.progress_percentage,
            lessons=[
                LessonCompletionSummary(lesson_id=item.lesson_id, completed=item.completed)
                for item in progress.lessons
            ],
        )


class LessonCompletionResponse(BaseModel):
    """Completion flag of a single lesson."""

    completed: bool


class LessonProgressResponse(BaseModel):
    """Stored progress record of a lesson."""

    user_id: UUID
    lesson_id: UUID
    completed: bool
    started_at: datetime | None = None
    completed_at: datetime | None = None
    updated_at: datetime

    @classmethod
    def from_entity(cls, progress: LessonProgress) -> "LessonProgressResponse":
        return cls(**progress.to_dict())
