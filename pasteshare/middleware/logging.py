"""
PasteShare — Access Logging Middleware
======================================

What:  One access log line per HTTP request, on the "pasteshare.access" logger.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client. 5xx responses log at ERROR, 4xx at WARNING.
       For a created paste the Location of the new paste is appended.

Paste contents (form bodies) are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from pasteshare.middleware.request_id import request_id_var

logger = logging.getLogger("pasteshare.access")

# Probes and API docs
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client = request.client.host if request.client else "unknown"
        line = "%s %s %d %.1fms [%s] from %s"
        args = [
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            client,
        ]
        location = response.headers.get("Location")
        if response.status_code == 201 and location:
            line += " -> %s"
            args.append(location)

        logger.log(
            _level_for(response.status_code),
            line,
            *args,
            extra={
                "request_id": request_id_var.get(""),
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
