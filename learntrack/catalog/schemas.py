"""Pydantic schemas for catalog relations.

Request and response models for linking, unlinking and reordering
course modules and module lessons.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import Link


# ==============================================================================
# Link Schemas
# ==============================================================================


class LinkModuleRequest(BaseModel):
    """Request to link a module to a course."""

    module_id: UUID = Field(..., description="Module ID to link")
    order: int | None = Field(
        None, ge=0, description="Position (appended after the last if None)"
    )


class LinkLessonRequest(BaseModel):
    """Request to link a lesson to a module."""

    lesson_id: UUID = Field(..., description="Lesson ID to link")
    order: int | None = Field(
        None, ge=0, description="Position (appended after the last if None)"
    )


class ReorderModulesRequest(BaseModel):
    """Full ordered set of a course's module ids."""

    module_ids: list[UUID] = Field(..., description="Ordered list of module IDs")


class ReorderLessonsRequest(BaseModel):
    """Full ordered set of a module's lesson ids."""

    lesson_ids: list[UUID] = Field(..., description="Ordered list of lesson IDs")


class LinkResponse(BaseModel):
    """A single parent/child link."""

    kind: str
    parent_id: UUID
    child_id: UUID
    order: int
    added_at: datetime

    @classmethod
    def from_entity(cls, link: Link) -> "LinkResponse":
        return cls(
            kind=link.kind.value,
            parent_id=link.parent_id,
            child_id=link.child_id,
            order=link.position,
            added_at=link.added_at,
        )


class LinkListResponse(BaseModel):
    """Children of a parent, in display order."""

    items: list[LinkResponse]
    total: int

    @classmethod
    def from_entities(cls, links: list[Link]) -> "LinkListResponse":
        return cls(
            items=[LinkResponse.from_entity(link) for link in links],
            total=len(links),
        )
