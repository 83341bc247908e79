import json
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from loguru import logger

from wallet_gateway.api.deps.rate_limit import rate_limit_connect, rate_limit_wallet
from wallet_gateway.api.deps.services import (
    get_connection_handler,
    get_cookie_writer,
    get_session_codec,
)
from wallet_gateway.api.deps.session import get_current_session
from wallet_gateway.core import responses
from wallet_gateway.core.config import settings
from wallet_gateway.core.exceptions.gateway import MalformedRequestError
from wallet_gateway.core.utils import validate_content_type
from wallet_gateway.schemas import (
    ConnectResponse,
    DisconnectResponse,
    SessionPayload,
    SessionResponse,
    SessionWallet,
)
from wallet_gateway.services.connection import ConnectionHandler
from wallet_gateway.services.cookies import SessionCookieWriter
from wallet_gateway.services.session_codec import SessionCodec

router = APIRouter()


@router.post(
    "/connect",
    response_model=ConnectResponse,
    dependencies=[Depends(rate_limit_connect)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
        status.HTTP_403_FORBIDDEN: {"model": responses.ForbiddenResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": responses.InternalServerErrorResponse},
    },
    summary="Connect wallet",
    description="Verify a signed wallet connection and start a session.",
)
async def connect_wallet(
    request: Request,
    response: Response,
    handler: Annotated[ConnectionHandler, Depends(get_connection_handler)],
    cookie_writer: Annotated[SessionCookieWriter, Depends(get_cookie_writer)],
):
    if not validate_content_type(request.headers.get("content-type")):
        raise MalformedRequestError("Content-Type must be application/json")

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedRequestError(exception=e)

    outcome = await handler.connect(body, origin=request.headers.get("origin"))
    cookie_writer.set_session(response, outcome.session_token, outcome.csrf_token)

    return ConnectResponse(return_url=outcome.return_url)


async def _disconnect(
    request: Request,
    response: Response,
    codec: SessionCodec,
    cookie_writer: SessionCookieWriter,
) -> DisconnectResponse:
    payload = codec.validate(request.cookies.get(settings.session_cookie_name))
    if payload is not None:
        logger.info(f"Wallet disconnected: {payload.address}")
    else:
        logger.info("Wallet disconnection requested without a valid session")

    cookie_writer.clear(response)
    return DisconnectResponse()


@router.post(
    "/disconnect",
    response_model=DisconnectResponse,
    dependencies=[Depends(rate_limit_wallet)],
    summary="Disconnect wallet",
    description="End the wallet session by clearing the session and CSRF cookies.",
)
async def disconnect_wallet(
    request: Request,
    response: Response,
    codec: Annotated[SessionCodec, Depends(get_session_codec)],
    cookie_writer: Annotated[SessionCookieWriter, Depends(get_cookie_writer)],
):
    return await _disconnect(request, response, codec, cookie_writer)


@router.delete(
    "/connect",
    response_model=DisconnectResponse,
    dependencies=[Depends(rate_limit_wallet)],
    summary="Disconnect wallet (alias)",
    description="Same as POST /disconnect.",
)
async def delete_connection(
    request: Request,
    response: Response,
    codec: Annotated[SessionCodec, Depends(get_session_codec)],
    cookie_writer: Annotated[SessionCookieWriter, Depends(get_cookie_writer)],
):
    return await _disconnect(request, response, codec, cookie_writer)


@router.get(
    "/session",
    response_model=SessionResponse,
    dependencies=[Depends(rate_limit_wallet)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": responses.SessionExpiredResponse},
    },
    summary="Check session",
    description="Report whether the wallet session cookie holds a valid session.",
)
async def check_session(
    session: Annotated[SessionPayload, Depends(get_current_session)],
):
    return SessionResponse(
        wallet=SessionWallet(
            address=session.address,
            network_id=session.network_id,
            name=session.name,
        )
    )
