"""Request logging middleware."""
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from studio.logging.config import StructuredLogger, get_structured_logger

logger = get_structured_logger(__name__)

FUNCTIONS_PREFIX = "/functions/v1/"
QUIET_PATHS = {"/health"}


def _function_name(path: str) -> str | None:
    """Proxy function served by this request, if any."""
    if path.startswith(FUNCTIONS_PREFIX):
        return path[len(FUNCTIONS_PREFIX):].strip("/") or None
    return None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Assigns the request id and logs one line per request outcome.

    An incoming `X-Request-ID` is kept so the id follows a call from the
    dashboard through to the webhook logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        path = request.url.path
        tokens = StructuredLogger.bind_request(request_id, _function_name(path))

        log = logger.debug if path in QUIET_PATHS or request.method == "OPTIONS" else logger.info
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed", request.method, path,
                extra={"event": "request_error", "duration_ms": self._elapsed(started)},
            )
            raise
        else:
            log(
                "%s %s -> %s", request.method, path, response.status_code,
                extra={
                    "event": "request",
                    "status_code": response.status_code,
                    "duration_ms": self._elapsed(started),
                    "client": request.client.host if request.client else None,
                },
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            StructuredLogger.unbind_request(tokens)

    @staticmethod
    def _elapsed(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)
