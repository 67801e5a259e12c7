"""Catalog relation API endpoints.

Provides routes for:
- Course modules: list, link, unlink, reorder
- Module lessons: list, link, unlink, reorder
"""

from uuid import UUID

from fastapi import APIRouter, Response, status

from learntrack.auth.dependencies import CurrentUser, TeacherUser
from learntrack.core.errors import LearntrackError, handle_error

from .dependencies import CourseModulesStoreDep, ModuleLessonsStoreDep
from .schemas import (
    LinkLessonRequest,
    LinkListResponse,
    LinkModuleRequest,
    LinkResponse,
    ReorderLessonsRequest,
    ReorderModulesRequest,
)


# ==============================================================================
# Course Modules
# ==============================================================================

router_courses = APIRouter(prefix="/v1/courses", tags=["catalog"])


@router_courses.get(
    "/{course_id}/modules",
    response_model=LinkListResponse,
    summary="List course modules",
)
async def list_course_modules(
    course_id: UUID,
    store: CourseModulesStoreDep,
    user: CurrentUser,
) -> LinkListResponse:
    """Modules linked to a course, in display order."""
    try:
        return LinkListResponse.from_entities(await store.list_children(course_id))
    except LearntrackError as e:
        raise handle_error(e) from e


@router_courses.post(
    "/{course_id}/modules",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link module to course",
)
async def link_module_to_course(
    course_id: UUID,
    data: LinkModuleRequest,
    response: Response,
    store: CourseModulesStoreDep,
    user: TeacherUser,
) -> LinkResponse:
    """Link an existing module to a course.

    Linking an already linked module returns the existing link with 200.
    """
    try:
        link, created = await store.try_link(course_id, data.module_id, data.order)
    except LearntrackError as e:
        raise handle_error(e) from e

    if not created:
        response.status_code = status.HTTP_200_OK
    return LinkResponse.from_entity(link)


@router_courses.delete(
    "/{course_id}/modules/{module_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unlink module from course",
)
async def unlink_module_from_course(
    course_id: UUID,
    module_id: UUID,
    store: CourseModulesStoreDep,
    user: TeacherUser,
) -> None:
    """Unlink a module from a course. Unlinked pairs are ignored."""
    try:
        await store.unlink(course_id, module_id)
    except LearntrackError as e:
        raise handle_error(e) from e


@router_courses.put(
    "/{course_id}/modules/order",
    response_model=LinkListResponse,
    summary="Reorder course modules",
)
async def reorder_course_modules(
    course_id: UUID,
    data: ReorderModulesRequest,
    store: CourseModulesStoreDep,
    user: TeacherUser,
) -> LinkListResponse:
    """Replace the order of every module in a course."""
    try:
        links = await store.reorder(course_id, data.module_ids)
        return LinkListResponse.from_entities(links)
    except LearntrackError as e:
        raise handle_error(e) from e


# ==============================================================================
# Module Lessons
# ==============================================================================

router_modules = APIRouter(prefix="/v1/modules", tags=["catalog"])


@router_modules.get(
    "/{module_id}/lessons",
    response_model=LinkListResponse,
    summary="List module lessons",
)
async def list_module_lessons(
    module_id: UUID,
    store: ModuleLessonsStoreDep,
    user: CurrentUser,
) -> LinkListResponse:
    """Lessons linked to a module, in display order."""
    try:
        return LinkListResponse.from_entities(await store.list_children(module_id))
    except LearntrackError as e:
        raise handle_error(e) from e


@router_modules.post(
    "/{module_id}/lessons",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link lesson to module",
)
async def link_lesson_to_module(
    module_id: UUID,
    data: LinkLessonRequest,
    response: Response,
    store: ModuleLessonsStoreDep,
    user: TeacherUser,
) -> LinkResponse:
    """Link an existing lesson to a module.

    Linking an already linked lesson returns the existing link with 200.
    """
    try:
        link, created = await store.try_link(module_id, data.lesson_id, data.order)
    except LearntrackError as e:
        raise handle_error(e) from e

    if not created:
        response.status_code = status.HTTP_200_OK
    return LinkResponse.from_entity(link)


@router_modules.delete(
    "/{module_id}/lessons/{lesson_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unlink lesson from module",
)
async def unlink_lesson_from_module(
    module_id: UUID,
    lesson_id: UUID,
    store: ModuleLessonsStoreDep,
    user: TeacherUser,
) -> None:
    """Unlink a lesson from a module. Unlinked pairs are ignored."""
    try:
        await store.unlink(module_id, lesson_id)
    except LearntrackError as e:
        raise handle_error(e) from e


@router_modules.put(
    "/{module_id}/lessons/order",
    response_model=LinkListResponse,
    summary="Reorder module lessons",
)
async def reorder_module_lessons(
    module_id: UUID,
    data: ReorderLessonsRequest,
    store: ModuleLessonsStoreDep,
    user: TeacherUser,
) -> LinkListResponse:
    """Replace the order of every lesson in a module."""
    try:
        links = await store.reorder(module_id, data.lesson_ids)
        return LinkListResponse.from_entities(links)
    except LearntrackError as e:
        raise handle_error(e) from e
