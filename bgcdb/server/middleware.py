"""
Request logging middleware for the bgcdb server.
"""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging import get_logger

logger = get_logger(__name__)

TIMING_HEADER = "X-Response-Time"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and report its duration in a header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - started) * 1000

        client = request.client.host if request.client else "-"
        query = f"?{request.url.query}" if request.url.query else ""
        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{client} {request.method} {request.url.path}{query} "
            f"-> {response.status_code} in {elapsed:.1f}ms")

        response.headers[TIMING_HEADER] = f"{elapsed:.2f}ms"
        return response
