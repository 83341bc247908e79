import hashlib
import hmac
import secrets

# Bytes of randomness per token
CSRF_TOKEN_LENGTH = 32


class CsrfGuard:
    """
    Issues and checks double-submit CSRF tokens.

    The token lives in a script-readable cookie; the page echoes it back in
    the X-CSRF-Token header on state-changing requests.
    """

    def __init__(self, token_length: int = CSRF_TOKEN_LENGTH):
        self.token_length = token_length

    def issue(self) -> str:
        """Generate a cryptographically secure CSRF token."""
        return secrets.token_urlsafe(self.token_length)

    @staticmethod
    def compare(provided: str | None, stored: str | None) -> bool:
        """
        Constant-time comparison of two tokens.

        Both values are hashed to fixed-length digests first, so inputs of
        different lengths compare unequal instead of raising.
        """
        if not provided or not stored:
            return False

        provided_digest = hashlib.sha256(provided.encode("utf-8")).digest()
        stored_digest = hashlib.sha256(stored.encode("utf-8")).digest()
        return hmac.compare_digest(provided_digest, stored_digest)
