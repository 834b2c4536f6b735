from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("ryo")

# Paths that get the timing header but no log lines
QUIET_PATHS = ("/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its caller, outcome and duration; expose the duration as X-Process-Time"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        path = request.url.path
        quiet = path in QUIET_PATHS
        client = request.client.host if request.client else "-"
        target = f"{path}?{request.url.query}" if request.url.query else path

        if not quiet:
            logger.debug(f"Request: {request.method} {target} from {client}")

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        if quiet:
            return response

        message = f"{client} {request.method} {target} -> {response.status_code} in {process_time:.4f}s"
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)
        return response
