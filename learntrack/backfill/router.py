"""Admin endpoint for the relation backfill."""

from fastapi import APIRouter

from learntrack.auth.dependencies import AdminUser
from learntrack.core.errors import LearntrackError, handle_error

from .dependencies import RelationBackfillDep
from .schemas import BackfillReportResponse


router = APIRouter(prefix="/v1/admin/backfill", tags=["admin"])


@router.post(
    "/relations",
    response_model=BackfillReportResponse,
    summary="Backfill relation links",
)
async def run_relation_backfill(
    backfill: RelationBackfillDep,
    user: AdminUser,
) -> BackfillReportResponse:
    """Create junction links from legacy parent references. Safe to re-run."""
    try:
        report = await backfill.backfill()
    except LearntrackError as e:
        raise handle_error(e) from e

    return BackfillReportResponse.from_report(report)
