from dataclasses import dataclass
from enum import StrEnum
from fnmatch import fnmatchcase
from typing import Callable, Sequence

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from yarl import URL

from wallet_gateway.core.constants import NoCacheHeaders
from wallet_gateway.services.session_codec import SessionCodec


class Policy(StrEnum):
    # Always let through, but forbid caching of the response
    BYPASS = "bypass"
    # Requires a valid wallet session, otherwise redirect to the no-auth page
    PROTECT = "protect"
    # Let through untouched
    PASS = "pass"


@dataclass(frozen=True)
class RoutePolicy:
    pattern: str
    policy: Policy

    def matches(self, path: str) -> bool:
        return fnmatchcase(path, self.pattern)


# Evaluated top to bottom, first match wins
DEFAULT_POLICIES: tuple[RoutePolicy, ...] = (
    RoutePolicy("/api/wallet/connect*", Policy.BYPASS),
    RoutePolicy("/api/wallet/session*", Policy.BYPASS),
    RoutePolicy("/api/wallet/disconnect*", Policy.BYPASS),
    RoutePolicy("/wallet", Policy.PROTECT),
    RoutePolicy("/user", Policy.PROTECT),
    RoutePolicy("/user/*", Policy.PROTECT),
    RoutePolicy("/api/wallet/*", Policy.PASS),
    RoutePolicy("/api/ipfs/*", Policy.PASS),
    RoutePolicy("/api/mint/*", Policy.PASS),
    RoutePolicy("/mint", Policy.PASS),
    RoutePolicy("/mint/*", Policy.PASS),
)


def resolve_policy(path: str, policies: Sequence[RoutePolicy]) -> Policy | None:
    """First matching policy for `path`, or None if the gateway does not cover it."""
    for route_policy in policies:
        if route_policy.matches(path):
            return route_policy.policy
    return None


class GatewayMiddleware(BaseHTTPMiddleware):
    """
    Per-path gate in front of the wallet API and wallet-only pages.

    - BYPASS: connect / session / disconnect endpoints. Passed through with
      no-cache headers so proxies never store session responses.
    - PROTECT: pages that need a wallet session. Missing or invalid session
      cookie redirects to the no-auth page with the requested path in the
      `redirect` query parameter.
    - PASS: covered but unrestricted paths.

    Paths matching no policy are not touched.
    """

    def __init__(
        self,
        app: ASGIApp,
        codec: SessionCodec,
        session_cookie_name: str = "wallet_session",
        no_auth_path: str = "/no-auth",
        policies: Sequence[RoutePolicy] = DEFAULT_POLICIES,
    ):
        super().__init__(app)
        self.codec = codec
        self.session_cookie_name = session_cookie_name
        self.no_auth_path = no_auth_path
        self.policies = tuple(policies)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        policy = resolve_policy(request.url.path, self.policies)

        if policy == Policy.BYPASS:
            response: Response = await call_next(request)
            response.headers.update(NoCacheHeaders.as_dict())
            return response

        if policy == Policy.PROTECT:
            session_token = request.cookies.get(self.session_cookie_name)
            if self.codec.validate(session_token) is None:
                return self._redirect_to_no_auth(request)

        return await call_next(request)

    def _redirect_to_no_auth(self, request: Request) -> RedirectResponse:
        redirect_path = request.url.path
        if request.url.query:
            redirect_path = f"{redirect_path}?{request.url.query}"

        no_auth_url = (
            URL(str(request.base_url))
            .with_path(self.no_auth_path)
            .with_query({"redirect": redirect_path})
        )

        logger.info(f"No valid wallet session for {request.url.path}, redirecting to no-auth")
        return RedirectResponse(url=str(no_auth_url))
