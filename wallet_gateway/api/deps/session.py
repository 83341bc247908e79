from typing import Annotated

from fastapi import Depends, Request

from wallet_gateway.api.deps.services import get_session_codec
from wallet_gateway.core.config import settings
from wallet_gateway.core.exceptions.gateway import UnauthenticatedError
from wallet_gateway.schemas import SessionPayload
from wallet_gateway.services.session_codec import SessionCodec, SessionStatus


async def get_current_session(
    request: Request,
    codec: Annotated[SessionCodec, Depends(get_session_codec)],
) -> SessionPayload:
    """
    Resolve the wallet session from the session cookie.

    Raises:
        UnauthenticatedError: No cookie, or an expired or invalid token.
            `session_expired` is False only when the token was present but
            could not be verified at all.
    """
    check = codec.inspect(request.cookies.get(settings.session_cookie_name))

    if check.payload is not None:
        return check.payload

    if check.status == SessionStatus.MISSING:
        raise UnauthenticatedError("No active session", session_expired=True)

    if check.status == SessionStatus.EXPIRED:
        raise UnauthenticatedError("Session expired", session_expired=True)

    raise UnauthenticatedError("Invalid session", session_expired=False)
