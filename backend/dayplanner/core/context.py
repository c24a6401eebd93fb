"""Per-request context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


@contextmanager
def request_id_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id for the duration of the block.

    Reuses the id already bound by the HTTP middleware when no explicit id is
    given, so generations started outside a request still get correlated logs.
    """
    current = request_id or get_request_id() or str(uuid4())
    token = request_id_ctx_var.set(current)
    try:
        yield current
    finally:
        request_id_ctx_var.reset(token)
