from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from wallet_gateway.core.config import settings
from wallet_gateway.core.exceptions.gateway import (
    GatewayError,
    MalformedRequestError,
    OriginRejectedError,
    SignatureRejectedError,
    UnexpectedError,
)
from wallet_gateway.core.utils import mask_token
from wallet_gateway.schemas import ConnectionRequest
from wallet_gateway.services.csrf import CsrfGuard
from wallet_gateway.services.origin import OriginGuard
from wallet_gateway.services.session_codec import SessionCodec
from wallet_gateway.services.verifier import SignatureVerifier


@dataclass(frozen=True)
class ConnectionOutcome:
    """Everything the endpoint needs to answer a successful connect."""

    session_token: str
    csrf_token: str
    return_url: str
    address: str


class ConnectionHandler:
    """
    Runs the wallet connect flow.

    Received -> ShapeValidated -> SignatureVerified -> SessionIssued, with an
    early exit at every gate. Rejections are raised as GatewayError
    subclasses and turned into JSON responses by the app's exception
    handlers; anything else becomes a generic UnexpectedError.
    """

    def __init__(
        self,
        codec: SessionCodec,
        verifier: SignatureVerifier,
        origin_guard: OriginGuard,
        csrf_guard: CsrfGuard,
    ):
        self.codec = codec
        self.verifier = verifier
        self.origin_guard = origin_guard
        self.csrf_guard = csrf_guard

    async def connect(self, body: Any, origin: str | None = None) -> ConnectionOutcome:
        """
        Verify a wallet connection and issue a session.

        Args:
            body: Decoded JSON request body
            origin: Value of the Origin header, if the browser sent one

        Returns:
            ConnectionOutcome with session and CSRF tokens and the return URL

        Raises:
            OriginRejectedError: Origin header present but not allowed
            MalformedRequestError: token, wallet or wallet.address missing
            SignatureRejectedError: The verifier refused the signature
            UnexpectedError: Any other failure
        """
        try:
            return await self._connect(body, origin)
        except GatewayError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while connecting wallet: {e}")
            raise UnexpectedError(exception=e, expose_details=not settings.is_production)

    async def _connect(self, body: Any, origin: str | None) -> ConnectionOutcome:
        if origin is not None and not self.origin_guard.validate_origin(origin):
            logger.warning(f"Wallet connect from disallowed origin: {origin}")
            raise OriginRejectedError()

        request = self._parse(body)
        wallet = request.wallet

        logger.info(
            f"Wallet connection attempt | Address: {wallet.address} | "
            f"Name: {wallet.name or 'Unknown'} | Network ID: {wallet.network_id} | "
            f"Token: {mask_token(request.token)}"
        )

        # Unknown top-level keys (signed hash, signature) go to the verifier as-is
        connection_data: dict[str, Any] = {
            **(request.model_extra or {}),
            "token": request.token,
            "data": wallet.model_dump(by_alias=True),
        }

        if not self.verifier.validate_shape(connection_data):
            raise MalformedRequestError("Invalid wallet data")

        try:
            result = await self.verifier.verify_connection(connection_data)
        except Exception as e:
            logger.error(f"Signature verifier failed for {wallet.address}: {e}")
            raise SignatureRejectedError("Signature verification failed", e)

        if not result.is_valid:
            logger.warning(f"Signature rejected for {wallet.address}: {result.message}")
            raise SignatureRejectedError(result.message or "Invalid signature")

        session_token = self.codec.issue(
            address=wallet.address,
            network_id=wallet.network_id,
            name=wallet.name,
        )
        return_url = self.origin_guard.sanitize_return_url(request.return_url)

        logger.info(f"Wallet connected: {wallet.address} ({wallet.name})")

        return ConnectionOutcome(
            session_token=session_token,
            csrf_token=self.csrf_guard.issue(),
            return_url=return_url,
            address=wallet.address,
        )

    @staticmethod
    def _parse(body: Any) -> ConnectionRequest:
        if not isinstance(body, dict):
            raise MalformedRequestError()

        try:
            return ConnectionRequest.model_validate(body)
        except ValidationError as e:
            logger.info(f"Invalid wallet connect payload: {e.error_count()} error(s)")
            raise MalformedRequestError(exception=e)
