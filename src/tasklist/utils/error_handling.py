"""
Centralized Error Logging
Structured error log entries with trace ids and credential redaction.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = ("password", "secret", "token")


def redact_dsn(dsn: str) -> str:
    """Replace the password in a connection string so it can be logged"""
    parts = urlsplit(dsn)
    if parts.password is None:
        return dsn

    netloc = parts.hostname or ""
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    if parts.username:
        netloc = f"{parts.username}:{REDACTED}@{netloc}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def sanitize_context(context: Dict[str, Any]) -> Dict[str, Any]:
    """Strip credentials from log context; connection strings keep everything but the password"""
    clean = {}
    for key, value in context.items():
        if isinstance(value, str) and "://" in value:
            clean[key] = redact_dsn(value)
        elif any(word in key.lower() for word in SENSITIVE_KEYS):
            clean[key] = REDACTED
        else:
            clean[key] = value
    return clean


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        exception: Optional[BaseException] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = False
    ) -> str:
        """Log structured error with full context, returning its trace id"""

        trace_id = str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if exception is not None:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }
            cause = exception.__cause__
            if cause is not None:
                log_entry["exception"]["cause"] = {
                    "type": type(cause).__name__,
                    "details": str(cause)
                }

            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = sanitize_context(extra_context)

        logger.error(json.dumps(log_entry, indent=2, default=str))

        return trace_id
