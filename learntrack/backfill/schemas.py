"""Pydantic schemas for the relation backfill."""

from uuid import UUID

from pydantic import BaseModel

from .service import BackfillReport


class BackfillFailureResponse(BaseModel):
    kind: str
    parent_id: UUID
    child_id: UUID
    error: str


class BackfillReportResponse(BaseModel):
    """Outcome counts of a backfill run."""

    created: int
    skipped: int
    failed: int
    failures: list[BackfillFailureResponse]

    @classmethod
    def from_report(cls, report: BackfillReport) -> "BackfillReportResponse":
        return cls(
            created=report.created,
            skipped=report.skipped,
            failed=report.failed,
            failures=[
                BackfillFailureResponse(
                    kind=f.kind.value,
                    parent_id=f.parent_id,
                    child_id=f.child_id,
                    error=f.error,
                )
                for f in report.failures
            ],
        )
