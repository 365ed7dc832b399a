"""Cross-origin headers middleware."""

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

ALLOWED_METHODS = "GET, POST, PUT, DELETE, PATCH, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"
EXPOSED_HEADERS = "X-Total-Count"


def cors_headers(origin: str | None, allow_origins: list[str]) -> dict[str, str]:
    """Headers for a response to a request sent from ``origin``.

    With ``*`` in ``allow_origins`` any origin is allowed; otherwise the
    origin is echoed back only when it is listed.
    """
    headers = {
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Expose-Headers": EXPOSED_HEADERS,
    }
    if "*" in allow_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin in allow_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Attach CORS headers to every response and answer OPTIONS directly."""

    def __init__(self, app: ASGIApp, allow_origins: list[str] | None = None) -> None:
        super().__init__(app)
        self._origins = list(allow_origins or ["*"])

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        headers = cors_headers(request.headers.get("Origin"), self._origins)

        # Preflight never reaches the routes.
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
