# projects_api/error_middleware.py
# Last-resort handler for exceptions no route or exception handler claimed.

from fastapi.responses import JSONResponse

from projects_api.logger import get_logger

log = get_logger("errors")

GENERIC_FAILURE_DETAIL = "Something failed."


class ExceptionLoggingMiddleware:
    """
    ASGI middleware that logs unhandled exceptions with full stack trace
    and answers with a generic 500.

    Sits inside RequestLoggingMiddleware, so the 500 still carries
    X-Request-ID. If the response already started, the exception is re-raised.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        started = {"value": False}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                started["value"] = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            method = scope.get("method", "")
            path = scope.get("path", "")
            log.error(
                f"[APP] Unhandled {type(exc).__name__} in {method} {path}",
                exc_info=exc,
                extra={
                    "request_id": scope.get("state", {}).get("request_id"),
                    "method": method,
                    "path": path,
                },
            )
            if started["value"]:
                raise
            response = JSONResponse(status_code=500, content={"detail": GENERIC_FAILURE_DETAIL})
            await response(scope, receive, send)
