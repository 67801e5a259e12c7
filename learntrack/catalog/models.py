"""Database models for the course catalog.

Cassandra table definitions for:
- Courses, modules and lessons (identity only; authoring lives elsewhere)
- Junction tables: course_modules, module_lessons

Architecture: Many-to-Many relationships via junction tables keyed by the
(parent, child) pair, so a pair can only ever be linked once. The legacy
`modules.course_id` and `lessons.module_id` columns are read only by the
relation backfill.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# course_id: legacy direct parent reference (pre junction table)
MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules (
    id UUID PRIMARY KEY,
    title TEXT,
    course_id UUID,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# module_id: legacy direct parent reference (pre junction table)
LESSON_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons (
    id UUID PRIMARY KEY,
    title TEXT,
    module_id UUID,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Junction Tables (Many-to-Many), one partition per parent
COURSE_MODULES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_modules (
    course_id UUID,
    module_id UUID,
    position INT,
    added_at TIMESTAMP,
    PRIMARY KEY (course_id, module_id)
)
"""

MODULE_LESSONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.module_lessons (
    module_id UUID,
    lesson_id UUID,
    position INT,
    added_at TIMESTAMP,
    PRIMARY KEY (module_id, lesson_id)
)
"""

CATALOG_TABLES_CQL = [
    COURSE_TABLE_CQL,
    MODULE_TABLE_CQL,
    LESSON_TABLE_CQL,
    COURSE_MODULES_TABLE_CQL,
    MODULE_LESSONS_TABLE_CQL,
]


# ==============================================================================
# Helper Functions
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ==============================================================================
# Link Kinds
# ==============================================================================


class LinkKind(str, Enum):
    """The two parent/child relations of the catalog graph."""

    COURSE_MODULE = "course_module"
    MODULE_LESSON = "module_lesson"

    @property
    def table(self) -> str:
        return _LINK_TABLES[self][0]

    @property
    def parent_column(self) -> str:
        return _LINK_TABLES[self][1]

    @property
    def child_column(self) -> str:
        return _LINK_TABLES[self][2]


_LINK_TABLES: dict[LinkKind, tuple[str, str, str]] = {
    LinkKind.COURSE_MODULE: ("course_modules", "course_id", "module_id"),
    LinkKind.MODULE_LESSON: ("module_lessons", "module_id", "lesson_id"),
}


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course entity: top-level product composed of ordered modules."""

    def __init__(
        self,
        id: UUID | None = None,
        title: str = "",
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title.strip()
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def __repr__(self) -> str:
        return f"<Course {self.title}>"


class Module:
    """Module entity: named grouping of lessons.

    Attributes:
        id: Unique identifier (UUID)
        title: Module title
        legacy_course_id: Direct course reference from before junction tables
    """

    def __init__(
        self,
        id: UUID | None = None,
        title: str = "",
        legacy_course_id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title.strip()
        self.legacy_course_id = legacy_course_id
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Module":
        """Create Module instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            legacy_course_id=getattr(row, "course_id", None),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def __repr__(self) -> str:
        return f"<Module {self.title}>"


class Lesson:
    """Lesson entity: atomic learning unit, optionally paired with a quiz.

    Attributes:
        id: Unique identifier (UUID)
        title: Lesson title
        legacy_module_id: Direct module reference from before junction tables
    """

    def __init__(
        self,
        id: UUID | None = None,
        title: str = "",
        legacy_module_id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title.strip()
        self.legacy_module_id = legacy_module_id
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Lesson":
        """Create Lesson instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title or "",
            legacy_module_id=getattr(row, "module_id", None),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def __repr__(self) -> str:
        return f"<Lesson {self.title}>"


class Link:
    """Junction entity linking a parent to a child with an explicit order.

    Attributes:
        kind: Which relation this link belongs to
        parent_id: Course UUID (course_module) or module UUID (module_lesson)
        child_id: Module UUID (course_module) or lesson UUID (module_lesson)
        position: Display order among the parent's children
        added_at: When the link was created
    """

    def __init__(
        self,
        kind: LinkKind,
        parent_id: UUID,
        child_id: UUID,
        position: int = 0,
        added_at: datetime | None = None,
    ):
        self.kind = kind
        self.parent_id = parent_id
        self.child_id = child_id
        self.position = position
        self.added_at = ensure_utc_aware(added_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, kind: LinkKind, row: Any) -> "Link":
        """Create Link instance from a junction table row."""
        return cls(
            kind=kind,
            parent_id=getattr(row, kind.parent_column),
            child_id=getattr(row, kind.child_column),
            position=row.position or 0,
            added_at=row.added_at,
        )

    @property
    def key(self) -> tuple[UUID, UUID]:
        return (self.parent_id, self.child_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            "position": self.position,
            "added_at": self.added_at,
        }

    def __repr__(self) -> str:
        return (
            f"<Link {self.kind.value} parent={self.parent_id} "
            f"child={self.child_id} pos={self.position}>"
        )


def sort_links(links: list[Link]) -> list[Link]:
    """Display order: ascending position, ties broken by child id."""
    return sorted(links, key=lambda link: (link.position, str(link.child_id)))
