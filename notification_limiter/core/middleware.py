"""HTTP middleware for request ID propagation.

Every request/response pair carries a correlation id: the incoming header is
reused when present, otherwise a UUID is generated. The id is bound to the
logging context for the duration of the request.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from notification_limiter.core.config import settings
from notification_limiter.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a request id to the logging context and echo it on the response.

    Adds the request id header (``LOG_REQUEST_ID_HEADER``, default
    ``X-Request-ID``) and ``X-Request-Duration-ms`` to every response.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
