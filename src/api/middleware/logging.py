"""Request logging for the assessment API.

Every request gets a request ID, and requests addressed to a session
(``/assessments/{session_id}/...`` or ``/insights/{session_id}``) are logged
with that session ID so API lines can be joined with the pipeline's own
session-scoped log records.
"""

import logging
import re
import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.shared.config import Settings

logger = logging.getLogger(__name__)

REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]{1,64}$")
SESSION_PATH_PATTERN = re.compile(r"^/(?:assessments|insights)/(session_[a-zA-Z0-9_]{1,64})(?:/|$)")

NO_SESSION = "-"


def session_id_from_path(path: str) -> str | None:
    """Return the session ID a request path addresses, if any."""
    match = SESSION_PATH_PATTERN.match(path)
    return match.group(1) if match else None


class SessionContextFilter(logging.Filter):
    """Give every record a ``session_id`` so the log format can include it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = NO_SESSION
        return True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its request ID, session ID and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Clients may pass their own ID for tracing; anything unsafe is replaced
        request_id = request.headers.get("X-Request-ID")
        if not request_id or not REQUEST_ID_PATTERN.match(request_id):
            request_id = str(uuid4())
        request.state.request_id = request_id

        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        session_id = session_id_from_path(request.url.path)
        if session_id:
            context["session_id"] = session_id

        start_time = time.perf_counter()
        logger.debug(f"Request started: {request.method} {request.url.path}", extra=context)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    **context,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "error": str(exc),
                },
            )
            raise

        response.headers["X-Request-ID"] = request_id

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )

        return response


def setup_logging(settings: Settings) -> None:
    """Configure application logging.

    JSON lines in production, human-readable lines otherwise. Both formats
    carry the session ID, or ``-`` for records outside a session.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.is_production:
        log_format = (
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "session_id": "%(session_id)s", '
            '"message": "%(message)s"}'
        )
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s] %(message)s"

    handler = logging.StreamHandler()
    handler.addFilter(SessionContextFilter())
    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S%z",
        handlers=[handler],
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(
        logging.INFO if settings.is_development else logging.WARNING
    )
