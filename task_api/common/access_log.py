import logging
import time
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from task_api.common.exceptions import request_log_fields

logger = logging.getLogger(__name__)


class AccessLogMiddleware:
    """Log one line per HTTP request with its status and response time.

    The request body is collected as the application reads it and exposed as
    ``request.state.raw_body`` for the error handlers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        raw_body = bytearray()
        status_code = 500
        content_length = "-"

        scope.setdefault("state", {})["raw_body"] = raw_body

        async def receive_with_body() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                raw_body.extend(message.get("body", b""))
            return message

        async def send_with_status(message: Message) -> None:
            nonlocal status_code, content_length
            if message["type"] == "http.response.start":
                status_code = message["status"]
                for name, value in message.get("headers", []):
                    if name.lower() == b"content-length":
                        content_length = value.decode("latin-1")
            await send(message)

        try:
            await self.app(scope, receive_with_body, send_with_status)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            request = Request(scope)
            url = request.url.path
            if request.url.query:
                url = f"{url}?{request.url.query}"
            logger.info(
                "%s %s %d %.3f ms - %s",
                request.method,
                url,
                status_code,
                duration_ms,
                content_length,
                extra={
                    **request_log_fields(request),
                    "status": status_code,
                    "duration_ms": round(duration_ms, 3),
                },
            )
