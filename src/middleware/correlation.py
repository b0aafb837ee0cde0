"""Correlation ID middleware.

Every HTTP request gets a correlation ID, taken from X-Correlation-ID
when the caller sends one. Purges launched by a request switch to their
own ID (the confirmation token) once they run in the background.

Written as plain ASGI rather than BaseHTTPMiddleware so FastAPI
background tasks, which deliver confirmation clicks, still run after the
response is sent.
"""

import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.logging_config import correlation_scope, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Polled by the orchestrator every few seconds; logged at debug only
PROBE_PATHS = frozenset({"/health/live", "/health/ready"})


class CorrelationIdMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = Headers(scope=scope).get(CORRELATION_ID_HEADER) or str(uuid.uuid4())
        path = scope.get("path", "")
        log = logger.debug if path in PROBE_PATHS else logger.info
        started = time.perf_counter()
        status_code: int | None = None

        async def send_with_header(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append(CORRELATION_ID_HEADER, correlation_id)
            await send(message)

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        with correlation_scope(correlation_id):
            try:
                await self.app(scope, receive, send_with_header)
            except Exception:
                logger.exception(
                    "Request failed",
                    method=scope.get("method"),
                    path=path,
                    duration_ms=elapsed_ms(),
                )
                raise
            log(
                "Request completed",
                method=scope.get("method"),
                path=path,
                status_code=status_code,
                duration_ms=elapsed_ms(),
            )
