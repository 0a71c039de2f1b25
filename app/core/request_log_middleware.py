import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger("app.requests")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        admin = settings.ADMIN_COOKIE_NAME in request.cookies
        logger.info(
            "%s %s -> %s (%.1f ms)%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            " [admin]" if admin else "",
        )
        return response
