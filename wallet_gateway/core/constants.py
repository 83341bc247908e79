class RateLimitPrefix:
    """
    Registry of rate limit key prefixes.

    Keys follow the pattern: ratelimit:{category}:{identifier}
    where identifier is a client IP or a wallet address.

    Example:
        ```python
        key = f"{RateLimitPrefix.WALLET_CONNECT}{ip_address}"
        # Result: "ratelimit:wallet-connect:192.168.1.1"
        ```
    """

    # Connect attempts, keyed by client IP
    WALLET_CONNECT = "ratelimit:wallet-connect:"

    # Session checks and disconnects, keyed by client IP
    WALLET = "ratelimit:wallet:"

    @classmethod
    def all_prefixes(cls) -> set[str]:
        return {
            value
            for key, value in cls.__dict__.items()
            if isinstance(value, str) and value.startswith("ratelimit:")
        }


class NoCacheHeaders:
    """Headers that keep intermediaries from caching session-sensitive responses."""

    CACHE_CONTROL = "no-cache, no-store, must-revalidate"
    PRAGMA = "no-cache"
    EXPIRES = "0"

    @classmethod
    def as_dict(cls) -> dict[str, str]:
        return {
            "Cache-Control": cls.CACHE_CONTROL,
            "Pragma": cls.PRAGMA,
            "Expires": cls.EXPIRES,
        }


CSRF_HEADER_NAME = "X-CSRF-Token"
DEFAULT_WALLET_NAME = "Unknown Wallet"
