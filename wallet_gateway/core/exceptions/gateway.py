from typing import Any

from starlette import status

from wallet_gateway.core.exceptions.base import CustomException

# =============================================================================
# Wallet Gateway Domain Exceptions (raised by Services, translated by handlers)
# =============================================================================


class SessionConfigurationError(CustomException):
    """Session signing cannot be set up (e.g. missing secret in production)."""

    def __init__(self, message: str, exception: Exception | None = None):
        super().__init__(message, exception)


class GatewayError(CustomException):
    """
    Base for errors that end a wallet request with a JSON error body.

    Each subclass fixes the HTTP status it maps to.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, exception: Exception | None = None):
        super().__init__(message, exception)

    def to_body(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


class MalformedRequestError(GatewayError):
    """Required request fields are missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self, message: str = "Invalid request parameters", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class UnauthenticatedError(GatewayError):
    """No session, or the session is invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        message: str = "No active session",
        session_expired: bool = True,
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)
        self.session_expired = session_expired

    def to_body(self) -> dict[str, Any]:
        return {**super().to_body(), "sessionExpired": self.session_expired}


class SignatureRejectedError(GatewayError):
    """The signature verifier refused the wallet connection."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid signature", exception: Exception | None = None):
        super().__init__(message, exception)


class OriginRejectedError(GatewayError):
    """Request Origin header is not on the allow-list."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Origin not allowed", exception: Exception | None = None):
        super().__init__(message, exception)


class UnexpectedError(GatewayError):
    """Any other fault. The message stays generic, details are opt-in."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "Internal server error",
        exception: Exception | None = None,
        expose_details: bool = False,
    ):
        super().__init__(message, exception)
        self.expose_details = expose_details

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.expose_details and self.exception is not None:
            body["details"] = str(self.exception)
        return body
