import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from jose.utils import base64url_decode, base64url_encode
from loguru import logger
from pydantic import ValidationError

from wallet_gateway.core.config import settings
from wallet_gateway.core.constants import DEFAULT_WALLET_NAME
from wallet_gateway.core.exceptions.gateway import SessionConfigurationError
from wallet_gateway.core.types import SessionClaimsDict
from wallet_gateway.schemas import SessionPayload

SESSION_ALGORITHM = "HS256"
SESSION_SECRET_BYTES = 32
TOKEN_SEGMENTS = 3


class SessionStatus(StrEnum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    MISSING = "missing"



def has_canonical_segments(token: str) -> bool:
    """
    True if `token` has three base64url segments that re-encode to the same text.

    The decoder ignores padding bits in the last character of a segment and
    skips characters outside the alphabet, so several strings decode to the
    same bytes. Only the canonical spelling is accepted.
    """
    segments = token.split(".")
    if len(segments) != TOKEN_SEGMENTS:
        return False

    try:
        return all(
            base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii") == segment
            for segment in segments
        )
    except ValueError:
        # Non-ASCII input or an impossible segment length
        return False


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of inspecting a session token."""

    status: SessionStatus
    payload: SessionPayload | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == SessionStatus.VALID


class SessionCodec:
    """
    Issues and validates stateless wallet session tokens.

    Tokens are HS256 JWTs: base64url header, payload and an HMAC-SHA256
    signature over both. Nothing is stored server-side; a token is only as
    good as its signature and its `exp` claim.

    validate() and inspect() never raise on bad input. A garbled, tampered,
    expired or wrongly signed token is just "no session".
    """

    def __init__(self, secret: bytes | str, ttl: timedelta = timedelta(hours=2)):
        if not secret:
            raise SessionConfigurationError("Session secret must not be empty")

        self._secret = secret.encode() if isinstance(secret, str) else secret
        self.ttl = ttl

    @classmethod
    def from_settings(cls) -> "SessionCodec":
        """
        Build the process-wide codec from settings.

        Raises:
            SessionConfigurationError: If no secret is configured in stg/prd.
        """
        ttl = timedelta(seconds=settings.session_ttl_seconds)

        if settings.session_secret is not None and settings.session_secret.get_secret_value():
            return cls(settings.session_secret.get_secret_value(), ttl=ttl)

        if settings.is_production:
            raise SessionConfigurationError(
                "SESSION_SECRET is required in "
                f"'{settings.current_environment.value}'. Sessions must stay verifiable "
                "across restarts and between workers."
            )

        logger.warning(
            "No SESSION_SECRET configured, generating a temporary secret. "
            "Sessions will not survive a restart and are not shared between workers."
        )
        return cls(secrets.token_bytes(SESSION_SECRET_BYTES), ttl=ttl)

    def issue(self, address: str, network_id: int, name: str | None = None) -> str:
        """
        Create a signed session token.

        Args:
            address: Wallet address
            network_id: Wallet network ID
            name: Wallet name, defaults to "Unknown Wallet"

        Returns:
            Encoded JWT session token
        """
        now = datetime.now(UTC)
        claims = SessionClaimsDict(
            address=address,
            networkId=network_id,
            name=name or DEFAULT_WALLET_NAME,
            iat=int(now.timestamp()),
            exp=int((now + self.ttl).timestamp()),
        )

        return jwt.encode(dict(claims), self._secret, algorithm=SESSION_ALGORITHM)

    def inspect(self, token: str | None) -> SessionCheck:
        """
        Verify a token and report why it is unusable, if it is.

        Returns:
            SessionCheck with status VALID and the payload, or EXPIRED,
            INVALID or MISSING and no payload.
        """
        if not token:
            return SessionCheck(SessionStatus.MISSING)

        if not has_canonical_segments(token):
            logger.debug("Rejected session token with non-canonical encoding")
            return SessionCheck(SessionStatus.INVALID)

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[SESSION_ALGORITHM],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            return SessionCheck(SessionStatus.EXPIRED)
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            return SessionCheck(SessionStatus.INVALID)
        except (TypeError, ValueError) as e:
            # Undecodable input that slipped past the JWT layer
            logger.debug(f"Rejected malformed session token: {type(e).__name__}")
            return SessionCheck(SessionStatus.INVALID)

        try:
            payload = SessionPayload(
                address=claims["address"],
                network_id=claims.get("networkId", 0),
                name=claims.get("name") or DEFAULT_WALLET_NAME,
                issued_at=datetime.fromtimestamp(claims["iat"], UTC),
                expires_at=datetime.fromtimestamp(claims["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            return SessionCheck(SessionStatus.INVALID)

        if not payload.address:
            return SessionCheck(SessionStatus.INVALID)

        if datetime.now(UTC) > payload.expires_at:
            return SessionCheck(SessionStatus.EXPIRED)

        return SessionCheck(SessionStatus.VALID, payload)

    def validate(self, token: str | None) -> SessionPayload | None:
        """Return the session payload, or None for any unusable token."""
        return self.inspect(token).payload
