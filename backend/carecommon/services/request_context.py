"""Request-scoped context: request id bound into structlog's context vars.

Anything logged while a request id is bound carries it, and the public API
client forwards it upstream in the request id header.
"""

import uuid
from typing import Optional

import structlog

REQUEST_ID_KEY = "request_id"


def new_request_id() -> str:
    return uuid.uuid4().hex


def bind_request_id(request_id: Optional[str] = None) -> str:
    """Bind `request_id` (or a fresh one) for the current context and return it."""
    request_id = request_id or new_request_id()
    structlog.contextvars.bind_contextvars(**{REQUEST_ID_KEY: request_id})
    return request_id


def get_request_id() -> str:
    """Request id bound for the current context, or "" when none is bound."""
    return structlog.contextvars.get_contextvars().get(REQUEST_ID_KEY, "")


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars(REQUEST_ID_KEY)
