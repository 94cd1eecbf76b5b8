from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("be4real")

# Endpoints that cannot be used without a bearer token
_PROTECTED_SUFFIXES = ("/users/me", "/reactions", "/reactions/me", "/follow")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not request.headers.get("Authorization") and request.method != "GET":
            if path.endswith(_PROTECTED_SUFFIXES):
                logger.warning(f"Protected endpoint {request.method} {path} accessed without auth header")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {path}")

        return response
