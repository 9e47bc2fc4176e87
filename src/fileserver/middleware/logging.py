"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One line per handled request, on the "fileserver.access" logger:

    TEXT (default, Apache-style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [10/Jun/2024:10:55:36 +0000] "GET /docs" 200 1234 0.81ms│
    │ ─────────   ──────────────────────────   ──────────  ─── ──── ──────│
    │ client IP   timestamp                    request     code size time │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    {"method": "GET", "path": "/docs", "client_ip": "127.0.0.1", ...}

Requests that never parse (400 "Invalid Request") do not reach the
middleware; the server logs those itself.

Route to a file or silence independently of the server log:

    logging.getLogger("fileserver.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("fileserver.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogMiddleware(Middleware):
    """
    Request logging middleware. Add it FIRST so its timing covers
    everything downstream.

    Usage:
        pipeline.add(AccessLogMiddleware())
        pipeline.add(AccessLogMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (Apache-style) or "json".
            log_level: Level access lines are emitted at.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format}")
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            # Still log the failed request, then let the server turn it into a 500
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        entry = RequestLog(
            method=str(request.method),
            path=request.path,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return response
