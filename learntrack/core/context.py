"""Per-request logging context.

Holds the request id, the authenticated learner and the upstream trace id
in a single ContextVar. structlog merges it into every event, so service
code never passes these ids around.
"""

from contextvars import ContextVar
from types import MappingProxyType
from typing import Any
from uuid import UUID, uuid4


_EMPTY: MappingProxyType[str, str] = MappingProxyType({})

_request_context: ContextVar[MappingProxyType[str, str]] = ContextVar(
    "learntrack_request_context", default=_EMPTY
)


def _bind(key: str, value: str | None) -> None:
    fields = dict(_request_context.get())
    if value:
        fields[key] = value
    else:
        fields.pop(key, None)
    _request_context.set(MappingProxyType(fields))


def set_request_id(request_id: str | None = None) -> str:
    """Bind the caller's request id, or a fresh one, and return it."""
    rid = request_id or str(uuid4())
    _bind("request_id", rid)
    return rid


def get_request_id() -> str:
    return _request_context.get().get("request_id", "")


def set_user_id(user_id: str | UUID | None) -> None:
    """Bind the learner resolved from the access token."""
    _bind("user_id", str(user_id) if user_id is not None else None)


def set_trace_id(trace_id: str | None) -> None:
    _bind("trace_id", trace_id)


def get_context() -> dict[str, Any]:
    """Bound fields, for the structlog context processor."""
    return dict(_request_context.get())


def clear_context() -> None:
    _request_context.set(_EMPTY)
