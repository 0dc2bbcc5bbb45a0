"""
Edge Cache Middleware

Consults EdgeResponseCache before any GET route runs and stores publicly
cacheable 200 responses on the way out. Routes under an excluded prefix
(provenance lookups, admin pages, health) always reach the application.
"""

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .cache_manager import CachedResponse, EdgeResponseCache, parse_max_age

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_PREFIXES = ("/admin/", "/health", "/upload")


def request_cache_key(request: Request) -> str:
    path = request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path


class EdgeCacheMiddleware(BaseHTTPMiddleware):
    """Cache-aside layer in front of the serving routes."""

    def __init__(
        self,
        app,
        cache: Optional[EdgeResponseCache] = None,
        excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
    ):
        super().__init__(app)
        self.cache = cache
        self.excluded_prefixes = tuple(excluded_prefixes)

    def _bypass(self, request: Request) -> bool:
        if self.cache is None or request.method != "GET":
            return True
        return request.url.path.startswith(self.excluded_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._bypass(request):
            return await call_next(request)

        cache_key = request_cache_key(request)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            response = Response(
                content=cached.body,
                status_code=cached.status_code,
                headers=dict(cached.headers),
            )
            response.headers["X-Cache"] = "HIT"
            return response

        response = await call_next(request)
        if response.status_code != 200:
            return response

        max_age = parse_max_age(response.headers.get("cache-control", ""))
        if max_age is None:
            return response

        body = b""
        async for chunk in response.body_iterator:
            body += chunk if isinstance(chunk, bytes) else chunk.encode()

        headers = [
            (name, value)
            for name, value in response.headers.items()
            if name.lower() != "x-cache"
        ]
        await self.cache.put(
            cache_key,
            CachedResponse(status_code=response.status_code, headers=headers, body=body),
            max_age=max_age,
        )

        replay = Response(
            content=body,
            status_code=response.status_code,
            headers=dict(headers),
        )
        replay.headers["X-Cache"] = "MISS"
        return replay
