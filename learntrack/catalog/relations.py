"""Relation store: ordered many-to-many links between catalog entities.

One store per link kind (course -> modules, module -> lessons). Linking is
idempotent, unlinking a missing pair is a no-op, and reordering a sibling
set is all-or-nothing.
"""

from uuid import UUID

import structlog

from learntrack.core.errors import (
    CourseNotFoundError,
    LessonNotFoundError,
    ModuleNotFoundError,
    ValidationError,
)

from .models import Link, LinkKind, sort_links
from .repository import CatalogRepository, LinkAlreadyExistsError, RelationRepository


logger = structlog.get_logger(__name__)


class RelationStore:
    """Link management for a single link kind."""

    def __init__(
        self,
        kind: LinkKind,
        relations: RelationRepository,
        catalog: CatalogRepository,
    ):
        self.kind = kind
        self.relations = relations
        self.catalog = catalog

    # ==========================================================================
    # Linking
    # ==========================================================================

    async def link(self, parent_id: UUID, child_id: UUID, order: int | None = None) -> Link:
        """Link child to parent, returning the existing link if already present.

        Args:
            parent_id: Course UUID or module UUID, depending on kind
            child_id: Module UUID or lesson UUID, depending on kind
            order: Position among siblings; appended after the last when None

        Raises:
            NotFoundError: If parent or child does not exist
            ValidationError: If order is negative
            UpstreamError: On storage failure
        """
        link, _created = await self.try_link(parent_id, child_id, order)
        return link

    async def try_link(
        self, parent_id: UUID, child_id: UUID, order: int | None = None
    ) -> tuple[Link, bool]:
        """Same as link(), also reporting whether this call created the link."""
        if order is not None and order < 0:
            msg = "Order must be zero or positive"
            raise ValidationError(msg)

        await self._ensure_endpoints(parent_id, child_id)

        if order is None:
            order = len(await self.relations.list_links(self.kind, parent_id))

        link = Link(kind=self.kind, parent_id=parent_id, child_id=child_id, position=order)

        try:
            await self.relations.insert_link(link)
        except LinkAlreadyExistsError:
            existing = await self.relations.get_link(self.kind, parent_id, child_id)
            logger.info(
                "link_already_exists",
                kind=self.kind.value,
                parent_id=str(parent_id),
                child_id=str(child_id),
            )
            # Unlinked concurrently between the insert and the read
            return (existing or link), False

        logger.info(
            "link_created",
            kind=self.kind.value,
            parent_id=str(parent_id),
            child_id=str(child_id),
            position=order,
        )
        return link, True

    async def unlink(self, parent_id: UUID, child_id: UUID) -> None:
        """Remove a link. Missing pairs are ignored."""
        await self.relations.delete_link(self.kind, parent_id, child_id)
        logger.info(
            "link_removed",
            kind=self.kind.value,
            parent_id=str(parent_id),
            child_id=str(child_id),
        )

    # ==========================================================================
    # Ordering
    # ==========================================================================

    async def list_children(self, parent_id: UUID) -> list[Link]:
        """Links of a parent ordered ascending by position, then child id."""
        links = await self.relations.list_links(self.kind, parent_id)
        return sort_links(links)

    async def reorder(self, parent_id: UUID, ordered_child_ids: list[UUID]) -> list[Link]:
        """Replace the order of the full sibling set.

        Raises:
            ValidationError: If the ids are not exactly the current children
            UpstreamError: On storage failure
        """
        if len(set(ordered_child_ids)) != len(ordered_child_ids):
            msg = "Duplicate ids in reorder request"
            raise ValidationError(msg)

        current = await self.relations.list_links(self.kind, parent_id)
        if set(ordered_child_ids) != {link.child_id for link in current}:
            msg = "Ids do not match the current children"
            raise ValidationError(msg)

        positions = [(child_id, index) for index, child_id in enumerate(ordered_child_ids)]
        await self.relations.set_positions(self.kind, parent_id, positions)

        logger.info(
            "children_reordered",
            kind=self.kind.value,
            parent_id=str(parent_id),
            count=len(positions),
        )
        return await self.list_children(parent_id)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    async def _ensure_endpoints(self, parent_id: UUID, child_id: UUID) -> None:
        if self.kind is LinkKind.COURSE_MODULE:
            if await self.catalog.get_course(parent_id) is None:
                raise CourseNotFoundError
            if await self.catalog.get_module(child_id) is None:
                raise ModuleNotFoundError
        else:
            if await self.catalog.get_module(parent_id) is None:
                raise ModuleNotFoundError
            if await self.catalog.get_lesson(child_id) is None:
                raise LessonNotFoundError
