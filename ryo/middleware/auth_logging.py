from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from ryo.core.config import settings

logger = logging.getLogger("ryo")

# Path prefixes (below the API prefix) that always need a session
PROTECTED_PREFIXES = ("/profile", "/files")


def is_protected(method: str, path: str) -> bool:
    if path.startswith(settings.API_V1_STR):
        path = path[len(settings.API_V1_STR):]
    if not path.startswith(PROTECTED_PREFIXES):
        return False
    # Anyone may read another user's picture URL
    if method == "GET" and path.startswith("/profile/picture/"):
        return False
    return True


class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if settings.SESSION_COOKIE_NAME not in request.cookies and is_protected(request.method, path):
            logger.warning(f"Protected endpoint {path} accessed without session cookie")

        response = await call_next(request)

        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {path}")
        return response
