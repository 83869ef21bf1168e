"""Unified exception hierarchy and FastAPI exception handlers.

Three families reach the handlers:

* `BaseAppException` for the REST routes, rendered as `{"error": {...}, "request_id"}`;
* `ProxyError` for `/functions/v1/*`, rendered as `{"success": false, "error", "details"?}`
  with permissive CORS headers at the provider's status;
* `ServiceClientError` raised by the webhook client and the workflows.
"""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Headers every proxy function response carries, errors included
PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-requested-with",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Max-Age": "86400",
}


class BaseAppException(Exception):
    """Base application exception; subclasses set the HTTP status."""

    status_code = 500

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(BaseAppException):
    status_code = 401


class AppValidationError(BaseAppException):
    """Invalid input."""
    status_code = 400


class NotFoundError(BaseAppException):
    status_code = 404


class BusinessLogicError(BaseAppException):
    """Operation not allowed in the current state."""
    status_code = 422


class ExternalServiceError(BaseAppException):
    """A provider, the backend or Supabase failed or answered unexpectedly."""
    status_code = 502


class SupabaseConfigError(BaseAppException):
    """Supabase URL or service key is not configured."""

    def __init__(self, message: str = "Supabase configuration not found"):
        super().__init__(message, "SUPABASE_NOT_CONFIGURED")


class ProxyError(Exception):
    """Error raised by a proxy function, rendered as the proxy envelope."""

    def __init__(self, status_code: int, message: str, details=None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# Client side errors, raised by the webhook client and the workflows

class ServiceClientError(Exception):
    """Base class for failures talking to the automation backend."""

    status_code = 502
    error_code = "UPSTREAM_ERROR"


class NetworkError(ServiceClientError):
    """The backend could not be reached."""

    def __init__(self, url: str, cause: Exception = None):
        self.url = url
        self.cause = cause
        super().__init__(
            f"Connection error: could not reach {url}. "
            "Check your internet connection and that the server is available."
        )


class UpstreamHTTPError(ServiceClientError):
    """The backend answered with a non-success status."""

    def __init__(self, status_code: int, reason: str, body: str):
        self.upstream_status = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"API call failed: {status_code} {reason} - {body}")


class ResponseFormatError(ServiceClientError):
    """A response did not have the expected shape."""

    def __init__(self, expected: str, payload=None):
        self.expected = expected
        self.payload = payload
        super().__init__(f"Unexpected response format: expected {expected}")


class WorkflowValidationError(ServiceClientError):
    """A required input is missing; raised before any network call."""

    status_code = 400
    error_code = "WORKFLOW_VALIDATION_ERROR"

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class WorkflowBusyError(ServiceClientError):
    """A submission was attempted while a call is outstanding."""

    status_code = 409
    error_code = "WORKFLOW_BUSY"

    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Operation already in progress ({state})")


def get_request_id(request: Request) -> str:
    """Request id assigned by the logging middleware."""
    return getattr(request.state, "request_id", "unknown")


def error_body(request: Request, code: str, message: str, details: dict = None) -> dict:
    """Unified REST error body."""
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error, "request_id": get_request_id(request)}


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s %s: %s", request.method, request.url.path, exc.error_code,
        extra={"error_code": exc.error_code, "error_message": exc.message, "details": exc.details},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.error_code, exc.message, exc.details),
    )


async def proxy_exception_handler(request: Request, exc: ProxyError) -> JSONResponse:
    logger.warning(
        "Proxy function failed with %s: %s", exc.status_code, exc.message,
        extra={"status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=PROXY_CORS_HEADERS)


async def service_client_exception_handler(request: Request, exc: ServiceClientError) -> JSONResponse:
    """Backend failures map to 502; workflow guards to 400 and 409."""
    details = {}
    if isinstance(exc, UpstreamHTTPError):
        details["upstream_status"] = exc.upstream_status
    elif isinstance(exc, WorkflowValidationError) and exc.field:
        details["field"] = exc.field

    logger.error(
        "%s %s: %s", request.method, request.url.path, type(exc).__name__,
        extra={"error_code": exc.error_code, "error_message": str(exc)},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.error_code, str(exc), details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    details = exc.detail if isinstance(exc.detail, dict) else None
    logger.warning("%s %s: HTTP %s", request.method, request.url.path, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, f"HTTP_{exc.status_code}", message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        "%s %s: request validation failed", request.method, request.url.path,
        extra={"validation_errors": errors},
    )
    return JSONResponse(
        status_code=422,
        content=error_body(request, "VALIDATION_ERROR", "Request validation failed", {"validation_errors": errors}),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s: unhandled %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=error_body(request, "INTERNAL_SERVER_ERROR", "An internal server error occurred"),
    )


def register_exception_handlers(app) -> None:
    """Register every exception handler on the app."""
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(ProxyError, proxy_exception_handler)
    app.add_exception_handler(ServiceClientError, service_client_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
