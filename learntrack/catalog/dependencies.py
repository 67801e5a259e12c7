"""FastAPI dependencies for catalog relations."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .relations import RelationStore


def _store_from_state(request: Request, name: str) -> RelationStore:
    store = getattr(request.app.state, name, None)
    if not store:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Relation store not available",
        )
    return store


async def get_course_modules_store(request: Request) -> RelationStore:
    """Get the course -> modules relation store from app state."""
    return _store_from_state(request, "course_modules_store")


async def get_module_lessons_store(request: Request) -> RelationStore:
    """Get the module -> lessons relation store from app state."""
    return _store_from_state(request, "module_lessons_store")


CourseModulesStoreDep = Annotated[RelationStore, Depends(get_course_modules_store)]
ModuleLessonsStoreDep = Annotated[RelationStore, Depends(get_module_lessons_store)]
