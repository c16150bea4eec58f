"""HTTP middleware for request correlation and access logging.

Every request gets a request ID (taken from the incoming header or
generated), stored in contextvars for the duration of the request so log
records emitted anywhere below carry it. The ID and the handling time are
echoed back in the response headers, and one access log line is written per
request.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from idea_validator.core.config import settings
from idea_validator.core.logging import clear_request_id, set_request_id

logger = logging.getLogger("idea_validator.access")


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate the request ID and log the request outcome.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with ``X-Request-ID`` (or the
            configured header) and ``X-Request-Duration-ms`` added.
    """
    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
