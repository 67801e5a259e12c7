"""Request middleware: binds the logging context and times each request."""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from learntrack.core.context import clear_context, set_request_id, set_trace_id


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Checked in order; traceparent is "{version}-{trace_id}-{parent_id}-{flags}"
_TRACE_HEADERS = ("X-Trace-ID", "X-B3-TraceId")
_TRACEPARENT_HEADER = "traceparent"


def trace_id_from_headers(request: Request) -> str | None:
    """Upstream trace id from the usual tracing headers, if any."""
    for header in _TRACE_HEADERS:
        if value := request.headers.get(header):
            return value

    parts = request.headers.get(_TRACEPARENT_HEADER, "").split("-")
    return parts[1] if len(parts) >= 2 and parts[1] else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request_id/trace_id for the request and log its outcome.

    The request id is echoed back in the X-Request-ID response header and
    kept on request.state for the error body.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ["/health"])

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request.state.request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_trace_id(trace_id_from_headers(request))

        log = logger.bind(method=request.method, path=request.url.path)
        quiet = not self.log_requests or request.url.path.startswith(self.exclude_paths)
        if not quiet:
            log.info("request_started")

        try:
            response = await call_next(request)
            if not quiet:
                emit = log.warning if response.status_code >= 400 else log.info
                emit(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=_elapsed_ms(started),
                )
            response.headers[REQUEST_ID_HEADER] = request.state.request_id
            return response
        except Exception as e:
            log.exception(
                "request_failed",
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        finally:
            clear_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
