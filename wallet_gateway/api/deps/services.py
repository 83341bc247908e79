from typing import Annotated

from fastapi import Depends, Request

from wallet_gateway.services.connection import ConnectionHandler
from wallet_gateway.services.cookies import SessionCookieWriter
from wallet_gateway.services.csrf import CsrfGuard
from wallet_gateway.services.origin import OriginGuard
from wallet_gateway.services.rate_limiter import RateLimiterRegistry
from wallet_gateway.services.session_codec import SessionCodec
from wallet_gateway.services.verifier import SignatureVerifier

# Components are built once in wallet_gateway.main and stored on app.state.
# Tests replace them with app.dependency_overrides.


def get_session_codec(request: Request) -> SessionCodec:
    return request.app.state.session_codec


def get_rate_limiter(request: Request) -> RateLimiterRegistry:
    return request.app.state.rate_limiter


def get_signature_verifier(request: Request) -> SignatureVerifier:
    return request.app.state.signature_verifier


def get_origin_guard(request: Request) -> OriginGuard:
    return request.app.state.origin_guard


def get_csrf_guard(request: Request) -> CsrfGuard:
    return request.app.state.csrf_guard


def get_cookie_writer(request: Request) -> SessionCookieWriter:
    return request.app.state.cookie_writer


def get_connection_handler(
    codec: Annotated[SessionCodec, Depends(get_session_codec)],
    verifier: Annotated[SignatureVerifier, Depends(get_signature_verifier)],
    origin_guard: Annotated[OriginGuard, Depends(get_origin_guard)],
    csrf_guard: Annotated[CsrfGuard, Depends(get_csrf_guard)],
) -> ConnectionHandler:
    return ConnectionHandler(
        codec=codec,
        verifier=verifier,
        origin_guard=origin_guard,
        csrf_guard=csrf_guard,
    )
