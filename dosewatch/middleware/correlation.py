"""Correlation ID middleware.

Every HTTP request gets an id, taken from the ``X-Correlation-ID`` request
header when the caller supplies one. The id is bound to the logging context
for the lifetime of the request and echoed back on the response, so engine
log lines ("Logged intake", "Risk transition", ...) can be tied to the call
that caused them.

Written as a pure ASGI callable rather than ``BaseHTTPMiddleware`` so the
response body is never buffered.
"""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from dosewatch.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
_HEADER_KEY = CORRELATION_ID_HEADER.lower().encode()


def _incoming_id(scope: Scope) -> str:
    for name, value in scope.get("headers", []):
        if name == _HEADER_KEY and value:
            return value.decode("latin-1")
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Bind a correlation id to each request and log its outcome."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = _incoming_id(scope)
        token = correlation_id_ctx.set(correlation_id)
        method = scope.get("method", "")
        path = scope.get("path", "")
        started = time.perf_counter()
        status_code: int | None = None

        logger.debug("Request started", method=method, path=path)

        async def send_with_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                headers = [
                    (k, v) for k, v in message.get("headers", []) if k != _HEADER_KEY
                ]
                headers.append((_HEADER_KEY, correlation_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_id)
        except Exception:
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            correlation_id_ctx.reset(token)
