"""learntrack API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learntrack.backfill.router import router as backfill_router
from learntrack.backfill.service import RelationBackfill
from learntrack.catalog.models import LinkKind
from learntrack.catalog.relations import RelationStore
from learntrack.catalog.repository import CatalogRepository, RelationRepository
from learntrack.catalog.router import router_courses, router_modules
from learntrack.config import Settings, get_settings
from learntrack.core.context import get_request_id
from learntrack.core.errors import LearntrackError, error_category, status_for
from learntrack.core.logging import configure_structlog, get_logger
from learntrack.core.middleware import RequestContextMiddleware
from learntrack.health.router import router as health_router
from learntrack.progress.repository import ProgressRepository
from learntrack.progress.router import router as progress_router
from learntrack.progress.service import ProgressService
from learntrack.quiz.repository import QuizRepository
from learntrack.quiz.router import router as quiz_router
from learntrack.quiz.service import QuizService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(
    settings, log_dir=Path(settings.log_dir), file_output=not settings.is_testing
)

logger = get_logger(__name__)


def build_services(session: Any, settings: Settings) -> dict[str, Any]:
    """Construct repositories, then the services on top of them.

    Returns:
        Mapping of app.state attribute name to instance
    """
    keyspace = settings.cassandra_keyspace

    catalog = CatalogRepository(session, keyspace)
    relations = RelationRepository(session, keyspace)
    progress = ProgressRepository(session, keyspace)
    quizzes = QuizRepository(session, keyspace)

    course_modules_store = RelationStore(LinkKind.COURSE_MODULE, relations, catalog)
    module_lessons_store = RelationStore(LinkKind.MODULE_LESSON, relations, catalog)
    progress_service = ProgressService(catalog, relations, progress)

    return {
        "course_modules_store": course_modules_store,
        "module_lessons_store": module_lessons_store,
        "progress_service": progress_service,
        "quiz_service": QuizService(
            catalog,
            quizzes,
            progress_service,
            pass_ratio=settings.quiz_pass_ratio,
            recent_window=timedelta(hours=settings.quiz_recent_window_hours),
        ),
        "relation_backfill": RelationBackfill(
            catalog, course_modules_store, module_lessons_store
        ),
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Driver import deferred until a connection is actually needed
    from learntrack.core.database import init_async_cassandra, shutdown_async_cassandra

    try:
        app.state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        for name, service in build_services(app.state.cassandra_session, settings).items():
            setattr(app.state, name, service)
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def _error_body(
    code: str, details: Any, status_code: int, request_id: str | None
) -> dict[str, Any]:
    return {
        "error": code,
        "details": details,
        "status_code": status_code,
        "request_id": request_id,
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps stack traces out of responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Learner progress tracking API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id() or None

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        details = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                error_category(exc.status_code),
                details,
                exc.status_code,
                _get_request_id_safe(request),
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed identifiers and payloads are client errors (400)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "validation_error",
                [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
                status.HTTP_400_BAD_REQUEST,
                _get_request_id_safe(request),
            ),
        )

    @app.exception_handler(LearntrackError)
    async def domain_exception_handler(
        request: Request, exc: LearntrackError
    ) -> ORJSONResponse:
        """Domain errors that escaped a route's own handling."""
        status_code = status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "domain_error",
                code=exc.code,
                error=exc.message,
                path=request.url.path,
                method=request.method,
            )
            details = "Internal server error"
        else:
            details = exc.message

        return ORJSONResponse(
            status_code=status_code,
            content=_error_body(
                exc.code, details, status_code, _get_request_id_safe(request)
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler; details are logged, never returned."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "internal_error",
                "An unexpected error occurred. Please try again later.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                _get_request_id_safe(request),
            ),
        )

    app.include_router(health_router)
    app.include_router(router_courses)
    app.include_router(router_modules)
    app.include_router(progress_router)
    app.include_router(quiz_router)
    app.include_router(backfill_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "learntrack API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
