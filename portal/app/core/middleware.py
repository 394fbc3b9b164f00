"""HTTP client hooks for request tracing and logging"""

import time
import uuid
from typing import Any, Dict, List

import httpx

from portal.app.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
STARTED_AT_EXTENSION = "portal.started_at"


class RequestIDHook:
    """Attach a unique request ID to each outgoing request"""

    async def __call__(self, request: httpx.Request) -> None:
        if REQUEST_ID_HEADER not in request.headers:
            request.headers[REQUEST_ID_HEADER] = str(uuid.uuid4())


class LoggingHooks:
    """Log request start and completion with duration"""

    async def on_request(self, request: httpx.Request) -> None:
        request_id = request.headers.get(REQUEST_ID_HEADER, "unknown")
        # Start time travels with the request
        request.extensions[STARTED_AT_EXTENSION] = time.time()

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
            }
        )

    async def on_response(self, response: httpx.Response) -> None:
        request = response.request
        request_id = request.headers.get(REQUEST_ID_HEADER, "unknown")
        started = request.extensions.get(STARTED_AT_EXTENSION)
        duration = time.time() - started if started is not None else 0.0

        log = logger.info if response.status_code < 400 else logger.warning
        log(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "url": str(request.url),
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            }
        )


def build_event_hooks() -> Dict[str, List[Any]]:
    """
    Event hooks for ``httpx.AsyncClient``

    Order matters: the request ID must be set before it is logged.

    Returns:
        Mapping suitable for the ``event_hooks`` client argument
    """
    logging_hooks = LoggingHooks()
    return {
        "request": [RequestIDHook(), logging_hooks.on_request],
        "response": [logging_hooks.on_response],
    }
