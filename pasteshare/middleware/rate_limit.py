"""
PasteShare — Submission Rate Limiting Middleware
================================================

What:  Per-IP sliding window limit on paste submissions.
How:   Only POST requests are counted; browsing, viewing and diffing are
       never limited. Each client IP keeps the timestamps of its recent
       submissions; once `max_requests` fall inside the last `window`
       seconds, further submissions get 429 with a Retry-After header.

State is in-process memory, so limits are per worker process. The 429 body is
built here; RequestIDMiddleware wraps this one so the body carries the request id.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from pasteshare.exceptions import RateLimitExceededError
from pasteshare.middleware.request_id import request_id_var
from pasteshare.schemas.paste import ErrorResponse

logger = logging.getLogger(__name__)

LIMITED_METHODS = {"POST"}


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, max_requests: int = 30, window: int = 60, **kwargs):
        super().__init__(app, **kwargs)
        self.max_requests = max_requests
        self.window = window
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in LIMITED_METHODS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.max_requests:
            retry_after = int(recent[0] + self.window - now) + 1
            exc = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Submission limit exceeded for %s: %d in %ds",
                client_ip, len(recent), self.window,
            )
            body = ErrorResponse(
                error="rate_limit_exceeded",
                message=exc.message,
                details=exc.context,
                request_id=request_id_var.get(""),
            )
            return JSONResponse(
                status_code=429,
                content=body.model_dump(),
                headers={"Retry-After": str(exc.retry_after)},
            )

        recent.append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no submissions inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
