"""Cassandra access for catalog entities and their junction tables.

CatalogRepository reads courses, modules and lessons (identity lookups and
the legacy parent references). RelationRepository owns the two junction
tables and is the only writer of links.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from cassandra.query import BatchStatement, BatchType

from learntrack.core.errors import BenignConflict, ValidationError, storage_errors

from .models import Course, Lesson, Link, LinkKind, Module


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class LinkAlreadyExistsError(BenignConflict):
    """The (parent, child) pair is already linked."""

    def __init__(self, message: str = "Link already exists"):
        super().__init__(message, "link_exists")


# ==============================================================================
# Catalog Repository
# ==============================================================================


class CatalogRepository:
    """Read access to courses, modules and lessons."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)
        self._get_module = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules WHERE id = ?
        """)
        self._get_lesson = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons WHERE id = ?
        """)
        self._list_modules = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules
        """)
        self._list_lessons = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lessons
        """)

    async def get_course(self, course_id: UUID) -> Course | None:
        with storage_errors("get_course"):
            rows = await self.session.aexecute(self._get_course, [course_id])
        row = rows.one()
        return Course.from_row(row) if row else None

    async def get_module(self, module_id: UUID) -> Module | None:
        with storage_errors("get_module"):
            rows = await self.session.aexecute(self._get_module, [module_id])
        row = rows.one()
        return Module.from_row(row) if row else None

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        with storage_errors("get_lesson"):
            rows = await self.session.aexecute(self._get_lesson, [lesson_id])
        row = rows.one()
        return Lesson.from_row(row) if row else None

    async def list_modules_with_legacy_course(self) -> list[Module]:
        """Modules that still carry a direct course reference."""
        with storage_errors("list_modules"):
            rows = await self.session.aexecute(self._list_modules)
        modules = [Module.from_row(row) for row in rows]
        return [m for m in modules if m.legacy_course_id is not None]

    async def list_lessons_with_legacy_module(self) -> list[Lesson]:
        """Lessons that still carry a direct module reference."""
        with storage_errors("list_lessons"):
            rows = await self.session.aexecute(self._list_lessons)
        lessons = [Lesson.from_row(row) for row in rows]
        return [lesson for lesson in lessons if lesson.legacy_module_id is not None]


# ==============================================================================
# Relation Repository
# ==============================================================================


class _LinkStatements:
    """Prepared statements for one junction table."""

    def __init__(self, session: "Session", keyspace: str, kind: LinkKind):
        table = f"{keyspace}.{kind.table}"
        parent = kind.parent_column
        child = kind.child_column

        self.insert = session.prepare(f"""
            INSERT INTO {table} ({parent}, {child}, position, added_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self.get = session.prepare(f"""
            SELECT * FROM {table} WHERE {parent} = ? AND {child} = ?
        """)
        self.list = session.prepare(f"""
            SELECT * FROM {table} WHERE {parent} = ?
        """)
        self.delete = session.prepare(f"""
            DELETE FROM {table} WHERE {parent} = ? AND {child} = ?
        """)
        self.set_position = session.prepare(f"""
            UPDATE {table} SET position = ?
            WHERE {parent} = ? AND {child} = ?
            IF EXISTS
        """)


class RelationRepository:
    """Junction table storage for course/module and module/lesson links.

    Both tables are keyed by (parent, child) so a pair exists at most once.
    """

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for both link kinds."""
        self._statements = {
            kind: _LinkStatements(self.session, self.keyspace, kind)
            for kind in LinkKind
        }

    async def insert_link(self, link: Link) -> Link:
        """Insert a link unless the pair already exists.

        Raises:
            LinkAlreadyExistsError: If the pair is already linked
            UpstreamError: On storage failure
        """
        stmt = self._statements[link.kind].insert
        with storage_errors("insert_link"):
            result = await self.session.aexecute(
                stmt, [link.parent_id, link.child_id, link.position, link.added_at]
            )
        if not result.was_applied:
            raise LinkAlreadyExistsError
        return link

    async def get_link(
        self, kind: LinkKind, parent_id: UUID, child_id: UUID
    ) -> Link | None:
        with storage_errors("get_link"):
            rows = await self.session.aexecute(
                self._statements[kind].get, [parent_id, child_id]
            )
        row = rows.one()
        return Link.from_row(kind, row) if row else None

    async def list_links(self, kind: LinkKind, parent_id: UUID) -> list[Link]:
        """All links of a parent, in storage order."""
        with storage_errors("list_links"):
            rows = await self.session.aexecute(
                self._statements[kind].list, [parent_id]
            )
        return [Link.from_row(kind, row) for row in rows]

    async def delete_link(self, kind: LinkKind, parent_id: UUID, child_id: UUID) -> None:
        with storage_errors("delete_link"):
            await self.session.aexecute(
                self._statements[kind].delete, [parent_id, child_id]
            )

    async def set_positions(
        self,
        kind: LinkKind,
        parent_id: UUID,
        positions: list[tuple[UUID, int]],
    ) -> None:
        """Rewrite positions of a parent's children in one LOGGED batch.

        Every update is conditioned on the link existing; the batch is
        applied entirely or not at all.

        Raises:
            ValidationError: If a link disappeared before the batch applied
            UpstreamError: On storage failure
        """
        if not positions:
            return

        stmt = self._statements[kind].set_position
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for child_id, position in positions:
            batch.add(stmt, [position, parent_id, child_id])

        with storage_errors("set_positions"):
            result = await self.session.aexecute(batch)
        if not result.was_applied:
            logger.warning(
                "reorder_not_applied",
                kind=kind.value,
                parent_id=str(parent_id),
            )
            msg = "Children changed while reordering; reload and retry"
            raise ValidationError(msg)
