"""Middleware for rate limiting and request logging."""
import time
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from stockroom.core.config import settings
from stockroom.logging_config import get_logger

logger = get_logger("middleware")

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing and status"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[ERROR] {request.method} {request.url.path} - "
                f"Duration: {process_time:.2f}ms - Error: {str(e)}",
                exc_info=True
            )
            raise

        process_time = (time.perf_counter() - start_time) * 1000  # ms

        logger.info(
            f"[RESPONSE] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Duration: {process_time:.2f}ms - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )

        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        return response


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Custom handler for rate limit errors"""
    logger.warning(
        f"[RATE_LIMIT] Client {request.client.host if request.client else 'unknown'} "
        f"exceeded rate limit on {request.url.path}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "message": "Too many requests. Please slow down and try again later.",
            "retry_after": 60
        }
    )
