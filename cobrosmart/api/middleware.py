"""
Request tracing middleware.

Every request gets an ID (client-supplied X-Request-ID or a fresh UUID4)
that error responses and log lines can refer back to.
"""

import logging
import time
from contextvars import ContextVar
from typing import Optional
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID and reports how long each request took.

    The ID is echoed back as X-Request-ID and the elapsed time as
    X-Response-Time-Ms.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        token = request_id_var.set(request_id)
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "%s %s failed after %.1fms: %s",
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                e,
                extra={"request_id": request_id},
            )
            raise
        finally:
            request_id_var.reset(token)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = str(elapsed_ms)
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={"request_id": request_id},
        )
        return response
