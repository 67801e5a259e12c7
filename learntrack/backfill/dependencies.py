"""FastAPI dependencies for the relation backfill."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import RelationBackfill


async def get_relation_backfill(request: Request) -> RelationBackfill:
    """Get relation backfill from app state."""
    backfill = getattr(request.app.state, "relation_backfill", None)
    if not backfill:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Relation backfill not available",
        )
    return backfill


RelationBackfillDep = Annotated[RelationBackfill, Depends(get_relation_backfill)]
