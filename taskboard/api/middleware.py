"""
HTTP middleware: error logging, request logging/ids, per-IP rate limit
"""
import logging
import threading
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from taskboard.api.responses import error_response
from taskboard.logger import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches everything the exception handlers did not, logs it, answers 500"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return error_response(500, "internal server error")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request id (X-Request-ID), logs method/path/status/duration"""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %d (%.1f ms)",
                request.method, request.url.path, response.status_code, duration_ms,
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed one-minute window per client IP

    Usage:
        app.add_middleware(RateLimitMiddleware, limit=settings.HTTP_REQUEST_LIMIT_BY_IP)
    """

    WINDOW_SECONDS = 60

    def __init__(self, app: ASGIApp, limit: int):
        super().__init__(app)
        self.limit = limit
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[float, int]] = {}

    def _hit(self, ip: str) -> bool:
        now = time.monotonic()
        with self._lock:
            started, count = self._windows.get(ip, (now, 0))
            if now - started >= self.WINDOW_SECONDS:
                started, count = now, 0
            count += 1
            self._windows[ip] = (started, count)
            if len(self._windows) > 10_000:
                self._windows = {
                    k: v for k, v in self._windows.items() if now - v[0] < self.WINDOW_SECONDS
                }
            return count <= self.limit

    async def dispatch(self, request, call_next):
        ip = request.client.host if request.client else "unknown"
        if self.limit > 0 and not self._hit(ip):
            logger.warning("rate limit exceeded ip=%s", ip)
            return error_response(429, "too many requests")
        return await call_next(request)
