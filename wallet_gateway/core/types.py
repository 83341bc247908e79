from typing import TypedDict


class SessionClaimsDict(TypedDict):
    """JWT claims carried by a wallet session token."""

    address: str
    networkId: int
    name: str
    iat: int  # Issued at timestamp
    exp: int  # Expiration timestamp


class RateLimitInfoDict(TypedDict):
    """Rate limit information for headers."""

    limit: int
    remaining: int
