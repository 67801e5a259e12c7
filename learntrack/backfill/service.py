"""Relation backfill: derive junction-table links from legacy parent references.

Every module with a direct course reference becomes a course_modules link
and every lesson with a direct module reference a module_lessons link,
all at order 0. Items are independent: a failure is counted and logged,
and the run moves on. Running it again creates nothing new and counts the
earlier links as skipped.
"""

from dataclasses import dataclass, field
from uuid import UUID

import structlog

from learntrack.catalog.models import LinkKind
from learntrack.catalog.relations import RelationStore
from learntrack.catalog.repository import CatalogRepository


logger = structlog.get_logger(__name__)

BACKFILL_ORDER = 0


@dataclass
class BackfillFailure:
    kind: LinkKind
    parent_id: UUID
    child_id: UUID
    error: str


@dataclass
class BackfillReport:
    created: int = 0
    skipped: int = 0
    failed: int = 0
    failures: list[BackfillFailure] = field(default_factory=list)


class RelationBackfill:
    """One-shot, re-runnable migration into the relation store."""

    def __init__(
        self,
        catalog: CatalogRepository,
        course_modules: RelationStore,
        module_lessons: RelationStore,
    ):
        self.catalog = catalog
        self.course_modules = course_modules
        self.module_lessons = module_lessons

    async def backfill(self) -> BackfillReport:
        """Link every child that still carries a legacy parent reference.

        Raises:
            UpstreamError: If the legacy references cannot be read at all
        """
        report = BackfillReport()

        modules = await self.catalog.list_modules_with_legacy_course()
        for module in modules:
            await self._migrate(
                self.course_modules, module.legacy_course_id, module.id, report
            )

        lessons = await self.catalog.list_lessons_with_legacy_module()
        for lesson in lessons:
            await self._migrate(
                self.module_lessons, lesson.legacy_module_id, lesson.id, report
            )

        logger.info(
            "relation_backfill_completed",
            created=report.created,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def _migrate(
        self,
        store: RelationStore,
        parent_id: UUID,
        child_id: UUID,
        report: BackfillReport,
    ) -> None:
        try:
            _link, created = await store.try_link(parent_id, child_id, BACKFILL_ORDER)
        except Exception as e:
            report.failed += 1
            report.failures.append(
                BackfillFailure(
                    kind=store.kind,
                    parent_id=parent_id,
                    child_id=child_id,
                    error=str(e),
                )
            )
            logger.warning(
                "relation_backfill_item_failed",
                kind=store.kind.value,
                parent_id=str(parent_id),
                child_id=str(child_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if created:
            report.created += 1
        else:
            report.skipped += 1
