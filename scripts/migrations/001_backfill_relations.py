"""Migration 001: Backfill junction-table links from legacy parent references.

Creates a course_modules link for every module that still has a direct
course_id and a module_lessons link for every lesson that still has a
direct module_id. Existing links are skipped, so the migration can be run
any number of times.

Usage:
    python -m scripts.migrations.001_backfill_relations
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import structlog

from learntrack.backfill.service import BackfillReport, RelationBackfill
from learntrack.catalog.models import LinkKind
from learntrack.catalog.relations import RelationStore
from learntrack.catalog.repository import CatalogRepository, RelationRepository
from learntrack.config.settings import get_settings
from learntrack.core.database import build_cluster
from learntrack.core.logging import configure_structlog


logger = structlog.get_logger(__name__)


async def migrate_up(session, keyspace: str) -> BackfillReport:
    """Apply migration - link every child with a legacy parent reference.

    Args:
        session: Cassandra session with aexecute support
        keyspace: Target keyspace

    Returns:
        Report with created, skipped and failed counts
    """
    catalog = CatalogRepository(session, keyspace)
    relations = RelationRepository(session, keyspace)
    backfill = RelationBackfill(
        catalog=catalog,
        course_modules=RelationStore(LinkKind.COURSE_MODULE, relations, catalog),
        module_lessons=RelationStore(LinkKind.MODULE_LESSON, relations, catalog),
    )
    return await backfill.backfill()


async def run_migration() -> int:
    """Run the migration. Returns the process exit code."""
    settings = get_settings()
    configure_structlog(settings, file_output=False)
    keyspace = settings.cassandra_keyspace

    logger.info(
        "migration_starting",
        migration="001_backfill_relations",
        keyspace=keyspace,
        hosts=settings.cassandra_hosts,
    )

    cluster = build_cluster(settings)
    session = cluster.connect()
    session.set_keyspace(keyspace)

    try:
        report = await migrate_up(session, keyspace)
        logger.info(
            "migration_completed",
            migration="001_backfill_relations",
            created=report.created,
            skipped=report.skipped,
            failed=report.failed,
        )
        for failure in report.failures:
            logger.warning(
                "migration_item_failed",
                kind=failure.kind.value,
                parent_id=str(failure.parent_id),
                child_id=str(failure.child_id),
                error=failure.error,
            )
    finally:
        session.shutdown()
        cluster.shutdown()

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run_migration()))
