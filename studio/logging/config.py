"""Structured logging configuration.

Log lines may carry provider credentials (query keys, `xi-api-key` headers,
Bearer tokens) and inline base64 pictures sent to the update webhook; both are
masked before anything reaches a handler.
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

# Request scoped context
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
function_name_var: ContextVar[str | None] = ContextVar("function_name", default=None)

# Attributes every LogRecord has; anything else came in through `extra=`
_RECORD_FIELDS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

KEY_PREFIX = 10


class SensitiveDataFilter:
    """Masks credentials, passwords and inline image payloads."""

    SENSITIVE_PATTERNS = [
        (r'("(?:api_key|xi-api-key|apikey)"\s*:\s*")([^"]{0,%d})[^"]*"' % KEY_PREFIX, r'\1\2***"'),
        (r"('(?:api_key|xi-api-key|apikey)'\s*:\s*')([^']{0,%d})[^']*'" % KEY_PREFIX, r"\1\2***'"),
        (r'(Bearer\s+)([^\s"\']{0,%d})[^\s"\']*' % KEY_PREFIX, r'\1\2***'),
        (r'([?&]key=)([^&\s"\']{0,%d})[^&\s"\']*' % KEY_PREFIX, r'\1\2***'),
        (r'("(?:password|access_token|refresh_token)"\s*:\s*")[^"]*"', r'\1***"'),
        (r'("base64"\s*:\s*")[^"]{64,}"', r'\1<base64 omitted>"'),
        (r'(data:image/[a-z]+;base64,)[A-Za-z0-9+/=]{64,}', r'\1<omitted>'),
    ]

    _compiled = [(re.compile(p, re.IGNORECASE), r) for p, r in SENSITIVE_PATTERNS]

    @classmethod
    def sanitize(cls, message: str) -> str:
        for pattern, replacement in cls._compiled:
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask the rendered message in place; never drops a record."""
        rendered = record.getMessage()
        masked = self.sanitize(rendered)
        if masked != rendered:
            record.msg, record.args = masked, None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the request context and `extra=` fields."""

    service = "video-studio-service"

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id
        function_name = function_name_var.get()
        if function_name:
            entry["function"] = function_name

        for key, value in vars(record).items():
            if key not in _RECORD_FIELDS and key not in entry:
                entry[key] = value

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc) if exc else None,
                "traceback": self.formatException(record.exc_info),
            }

        return SensitiveDataFilter.sanitize(json.dumps(entry, ensure_ascii=False, default=str))


class TextFormatter(logging.Formatter):
    """Readable single-line format for development, prefixed with the request id."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or "-"
        return SensitiveDataFilter.sanitize(super().format(record))


class StructuredLogger:
    """Process logging setup and request context binding."""

    # Chatty client libraries only report warnings
    QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack", "postgrest", "gotrue", "supabase")

    @staticmethod
    def setup_logging(log_level: str = "INFO", enable_json: bool = True) -> None:
        """Configure the root logger with a single stdout handler."""
        level = getattr(logging, log_level.upper(), logging.INFO)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(JSONFormatter() if enable_json else TextFormatter())
        handler.addFilter(SensitiveDataFilter())

        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(level)
        root.addHandler(handler)

        for name in StructuredLogger.QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        logging.getLogger(__name__).info(
            "Logging configured", extra={"log_level": log_level, "json_format": enable_json}
        )

    @staticmethod
    def bind_request(request_id: str, function_name: str | None = None) -> list:
        """Set the request context; returns the tokens `unbind_request` needs."""
        return [request_id_var.set(request_id), function_name_var.set(function_name)]

    @staticmethod
    def unbind_request(tokens: list) -> None:
        request_token, function_token = tokens
        function_name_var.reset(function_token)
        request_id_var.reset(request_token)


def mask_key(value: str | None) -> str:
    """Credential rendering for log lines: a short prefix only."""
    if not value:
        return "<none>"
    return value[:KEY_PREFIX] + "***"


def get_structured_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
