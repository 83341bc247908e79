from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from wallet_gateway.core.config import Environment, settings
from wallet_gateway.core.constants import CSRF_HEADER_NAME
from wallet_gateway.services.csrf import CsrfGuard

# Safe HTTP methods that don't require CSRF protection
SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}

# Paths exempt from CSRF protection. Connect runs before any CSRF cookie
# exists; disconnect only clears cookies.
EXEMPT_PATHS = {
    "/api/wallet/connect",
    "/api/wallet/disconnect",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit CSRF check for state-changing requests.

    The csrf_token cookie is issued together with the wallet session on
    connect. POST, PUT, PATCH and DELETE requests must echo it in the
    X-CSRF-Token header. Safe methods and exempt paths are not checked.

    Reference: https://cheatsheetseries.owasp.org/cheatsheets/Cross-Site_Request_Forgery_Prevention_Cheat_Sheet.html
    """

    def __init__(
        self,
        app: ASGIApp,
        guard: CsrfGuard | None = None,
        cookie_name: str = "csrf_token",
    ):
        super().__init__(app)
        self.guard = guard or CsrfGuard()
        self.cookie_name = cookie_name

    def _is_exempt(self, request: Request) -> bool:
        path = request.url.path

        if path in EXEMPT_PATHS:
            return True

        exempt_prefixes = ("/docs", "/redoc", "/openapi")
        return any(path.startswith(prefix) for prefix in exempt_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip CSRF in local environment for easier development
        if settings.current_environment == Environment.LOCAL:
            return await call_next(request)

        if request.method in SAFE_METHODS or self._is_exempt(request):
            return await call_next(request)

        cookie_token = request.cookies.get(self.cookie_name)
        header_token = request.headers.get(CSRF_HEADER_NAME)

        if not cookie_token or not header_token:
            logger.warning(
                f"CSRF validation failed - missing tokens. "
                f"Cookie present: {bool(cookie_token)}, Header present: {bool(header_token)}, "
                f"Path: {request.url.path}"
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "success": False,
                    "error": f"CSRF token missing. Include {CSRF_HEADER_NAME} header "
                    f"matching the {self.cookie_name} cookie.",
                },
            )

        if not self.guard.compare(header_token, cookie_token):
            logger.warning(f"CSRF validation failed - token mismatch. Path: {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"success": False, "error": "CSRF token validation failed."},
            )

        return await call_next(request)
