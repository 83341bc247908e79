"""
Boundary to the wallet signature verifier.

Cryptographic verification lives outside this service. The gateway only
depends on the SignatureVerifier interface; a concrete verifier is selected
with the SIGNATURE_VERIFIER setting ("package.module:attribute", pointing at
an instance, a class or a zero-argument factory).
"""

import importlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from loguru import logger

from wallet_gateway.core.config import settings
from wallet_gateway.core.exceptions.gateway import SessionConfigurationError


@dataclass(frozen=True)
class VerificationResult:
    is_valid: bool
    message: str


class SignatureVerifier(ABC):
    """Checks that a wallet really signed a connection request."""

    def validate_shape(self, connection_data: dict[str, Any]) -> bool:
        """Structural check: the payload carries wallet data with an address."""
        data = connection_data.get("data") if isinstance(connection_data, dict) else None
        return isinstance(data, dict) and bool(data.get("address"))

    @abstractmethod
    async def verify_connection(self, connection_data: dict[str, Any]) -> VerificationResult:
        """
        Verify the signed challenge in `connection_data`.

        May be slow (network, crypto) and may fail; failures are reported as
        an invalid result, not raised.
        """


class UnconfiguredSignatureVerifier(SignatureVerifier):
    """Fallback when no verifier is configured. Rejects every connection."""

    async def verify_connection(self, connection_data: dict[str, Any]) -> VerificationResult:
        return VerificationResult(
            is_valid=False,
            message="Signature verification is not configured",
        )


def load_signature_verifier(path: str | None = None) -> SignatureVerifier:
    """
    Resolve the verifier named by `path` (default: settings.signature_verifier).

    Raises:
        SessionConfigurationError: If the path cannot be imported or does not
            resolve to a SignatureVerifier.
    """
    path = path if path is not None else settings.signature_verifier

    if not path:
        logger.warning("SIGNATURE_VERIFIER is not set; every wallet connection will be rejected")
        return UnconfiguredSignatureVerifier()

    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise SessionConfigurationError(
            f"SIGNATURE_VERIFIER must look like 'package.module:attribute', got '{path}'"
        )

    try:
        target = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as e:
        raise SessionConfigurationError(f"Cannot load signature verifier '{path}'", e)

    is_verifier_class = isinstance(target, type) and issubclass(target, SignatureVerifier)
    is_factory = callable(target) and not isinstance(target, (type, SignatureVerifier))

    try:
        verifier = target() if is_verifier_class or is_factory else target
    except TypeError as e:
        raise SessionConfigurationError(f"Cannot build signature verifier from '{path}'", e)

    if not isinstance(verifier, SignatureVerifier):
        raise SessionConfigurationError(
            f"'{path}' resolved to {type(verifier).__name__}, expected a SignatureVerifier"
        )

    logger.info(f"Using signature verifier {type(verifier).__name__} from '{path}'")
    return verifier
