"""Shared fixtures: in-memory repositories, wired services and an HTTP client."""

import os
from datetime import UTC, datetime
from uuid import UUID, uuid4

# Must be set before learntrack.main configures logging
os.environ.setdefault("LEARNTRACK_ENVIRONMENT", "testing")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from learntrack.auth.permissions import UserRole
from learntrack.backfill.service import RelationBackfill
from learntrack.catalog.models import LinkKind
from learntrack.catalog.relations import RelationStore
from learntrack.progress.service import ProgressService
from learntrack.quiz.service import QuizService
from tests.fakes import (
    FakeClock,
    FakeCatalogRepository,
    FakeProgressRepository,
    FakeQuizRepository,
    FakeRelationRepository,
    auth_headers,
)


# ==============================================================================
# Repositories
# ==============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def catalog() -> FakeCatalogRepository:
    return FakeCatalogRepository()


@pytest.fixture
def relations() -> FakeRelationRepository:
    return FakeRelationRepository()


@pytest.fixture
def progress_repo() -> FakeProgressRepository:
    return FakeProgressRepository()


@pytest.fixture
def quiz_repo() -> FakeQuizRepository:
    return FakeQuizRepository()


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def course_modules(catalog, relations) -> RelationStore:
    return RelationStore(LinkKind.COURSE_MODULE, relations, catalog)


@pytest.fixture
def module_lessons(catalog, relations) -> RelationStore:
    return RelationStore(LinkKind.MODULE_LESSON, relations, catalog)


@pytest.fixture
def progress_service(catalog, relations, progress_repo, clock) -> ProgressService:
    return ProgressService(catalog, relations, progress_repo, clock=clock)


@pytest.fixture
def quiz_service(catalog, quiz_repo, progress_service, clock) -> QuizService:
    return QuizService(catalog, quiz_repo, progress_service, clock=clock)


@pytest.fixture
def relation_backfill(catalog, course_modules, module_lessons) -> RelationBackfill:
    return RelationBackfill(catalog, course_modules, module_lessons)


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def app(
    course_modules,
    module_lessons,
    progress_service,
    quiz_service,
    relation_backfill,
) -> FastAPI:
    """Application with in-memory services on app.state."""
    from learntrack.main import create_app

    application = create_app()
    application.state.course_modules_store = course_modules
    application.state.module_lessons_store = module_lessons
    application.state.progress_service = progress_service
    application.state.quiz_service = quiz_service
    application.state.relation_backfill = relation_backfill
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Client without lifespan, so no database connection is attempted."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def student_headers(user_id: UUID) -> dict[str, str]:
    return auth_headers(user_id, UserRole.STUDENT)


@pytest.fixture
def teacher_headers() -> dict[str, str]:
    return auth_headers(uuid4(), UserRole.TEACHER)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth_headers(uuid4(), UserRole.ADMIN)
