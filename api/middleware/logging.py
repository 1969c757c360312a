"""
Request logging middleware.

One line per request: METHOD path status=... duration=...ms client=...
Report calls also carry the report selection and date range
(report=..., date_from=..., date_to=..., union_id=...) plus the source
kinds that failed for that generation (failed=members,cbas).

5xx logs at ERROR; 4xx, slow requests and degraded reports at WARNING.
"""
import logging
import time
from typing import List

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..config import LOG_LEVEL

logger = logging.getLogger("union_reports")

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

SLOW_REQUEST_MS = 3000
REPORTS_PREFIX = "/api/reports"
REPORT_PARAMS = ("date_from", "date_to", "union_id")


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def report_fields(request: Request) -> List[str]:
    """Report key(s) and query selectors of a /api/reports call, as key=value pairs."""
    path = request.url.path.rstrip("/")
    if not path.startswith(REPORTS_PREFIX):
        return []

    tail = path[len(REPORTS_PREFIX):].lstrip("/")
    if tail == "catalogue":
        return []
    keys = [tail] if tail else request.query_params.getlist("keys")

    fields = [f"report={','.join(keys) or 'all'}"]
    for name in REPORT_PARAMS:
        value = request.query_params.get(name)
        if value:
            fields.append(f"{name}={value}")
    return fields


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        parts = [
            f"{request.method} {request.url.path}",
            f"status={response.status_code}",
            f"duration={duration_ms}ms",
            *report_fields(request),
        ]
        failed = getattr(request.state, "failed_kinds", None)
        if failed:
            parts.append(f"failed={','.join(failed)}")
        parts.append(f"client={_client_ip(request)}")
        msg = " ".join(parts)

        if response.status_code >= 500:
            logger.error(msg)
        elif response.status_code >= 400 or duration_ms > SLOW_REQUEST_MS or failed:
            logger.warning(msg)
        else:
            logger.info(msg)

        return response
