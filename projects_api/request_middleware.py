import time
import uuid

from projects_api.logger import get_logger

log = get_logger("http")


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestLoggingMiddleware:
    """
    ASGI middleware that logs incoming requests and responses,
    sets X-Request-ID header, and records duration.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request_id = generate_request_id()
        scope.setdefault("state", {})["request_id"] = request_id

        method = scope.get("method", "")
        path = scope.get("path", "")
        extra = {"request_id": request_id, "method": method, "path": path}

        start = time.perf_counter()
        log.debug("Incoming request", extra=extra)

        status_container = {"status": None}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status_container["status"] = message.get("status", 0)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("utf-8")))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start
            log.info(
                "Request completed",
                extra={
                    **extra,
                    "status_code": status_container["status"],
                    "duration_ms": round(duration * 1000, 2),
                },
            )
