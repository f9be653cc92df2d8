"""
CatHealth Backend — Request Logging Middleware
================================================

What:  One access log line per HTTP request, on the "cathealth.access" logger.
How:   Measures wall time around call_next and logs method, path, status,
       duration, request ID and (when the gate resolved one) the user id.

Log level follows the status code:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Never logged: request bodies, uploaded file contents, Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cathealth.middleware.request_id import request_id_var

logger = logging.getLogger("cathealth.access")

# Probed every few seconds by Docker/load balancers
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Populated by get_current_user on protected routes only
        user = getattr(request.state, "user", None)
        user_id = user.user_id if user is not None else None

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user_id if user_id is not None else "-",
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )

        return response
