from fastapi import Request
from fastapi.responses import JSONResponse
import asyncio
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from ryo.core.exceptions import error_body

logger = logging.getLogger("ryo")


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answer 504 once a request has been running for longer than `timeout` seconds.

    Work already handed to the threadpool keeps running; only the response is cut short.
    """

    def __init__(self, app, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Request {request.method} {request.url.path} timed out after {self.timeout}s")
            return JSONResponse(status_code=504, content=error_body("request timed out", "timeout"))
