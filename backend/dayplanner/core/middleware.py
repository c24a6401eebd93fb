"""Custom FastAPI middleware."""
from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dayplanner.core.context import request_id_scope

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the call and echo it back as X-Request-Id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        incoming = request.headers.get("X-Request-Id")
        started = time.perf_counter()

        with request_id_scope(incoming) as request_id:
            request.state.request_id = request_id
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)

        response.headers["X-Request-Id"] = request_id
        return response
