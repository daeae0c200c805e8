"""
Cache control middleware for the polled reaction endpoints.

Clients poll sentiment counts and reaction listings, so those responses must
never be served from a browser or proxy cache. Health probes and metrics,
which live outside the API prefix, are left to the server defaults.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",  # HTTP/1.0 caches
    "Expires": "0",
}


class CacheControlMiddleware(BaseHTTPMiddleware):
    """Mark responses under ``path_prefix`` as non-cacheable.

    An empty prefix applies the headers to every response.
    """

    def __init__(self, app: ASGIApp, path_prefix: str = ""):
        super().__init__(app)
        self.path_prefix = path_prefix.rstrip("/")

    def _applies_to(self, path: str) -> bool:
        if not self.path_prefix:
            return True
        return path == self.path_prefix or path.startswith(f"{self.path_prefix}/")

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if self._applies_to(request.url.path):
            response.headers.update(NO_STORE_HEADERS)

        return response
