import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logger import logger

class LogMiddleware(BaseHTTPMiddleware):
    """Access log line per request, including scheduling query parameters."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        query = f"?{request.url.query}" if request.url.query else ""
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path}{query} -> "
            f"{response.status_code} ({elapsed * 1000:.1f} ms)"
        )
        return response
