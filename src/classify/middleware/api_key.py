"""
API Key Middleware
Rejects requests that do not carry the configured X-Api-Key header
"""

import logging
import secrets

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware for shared-secret authentication"""

    # Paths reachable without a key
    EXEMPT_PATHS = [
        "/health",
    ]

    def __init__(self, app, api_key: str):
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(self, request: Request, call_next):
        # Skip auth for CORS preflight requests
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in self.EXEMPT_PATHS:
            return await call_next(request)

        provided = request.headers.get(API_KEY_HEADER, "")
        if not provided or not secrets.compare_digest(provided.encode(), self.api_key.encode()):
            logger.warning(f"Rejected {request.method} {path}: invalid or missing API key")
            return JSONResponse(
                status_code=401,
                content={"success": False, "error": "Invalid or missing API key"},
            )

        return await call_next(request)
