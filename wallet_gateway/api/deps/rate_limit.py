from typing import Annotated

from fastapi import Depends, Request
from loguru import logger

from wallet_gateway.api.deps.services import get_rate_limiter
from wallet_gateway.core.config import settings
from wallet_gateway.core.constants import RateLimitPrefix
from wallet_gateway.core.exceptions.http_exceptions import TooManyRequestsException
from wallet_gateway.core.utils import get_client_ip
from wallet_gateway.services.rate_limiter import RateLimiterRegistry


def create_rate_limit(prefix: str, message: str):
    """
    Build an IP-keyed token bucket dependency.

    Args:
        prefix: One of the RateLimitPrefix values
        message: Detail returned with the 429 response

    Example:
        ```python
        rate_limit_connect = create_rate_limit(RateLimitPrefix.WALLET_CONNECT, "...")

        @router.post("/connect", dependencies=[Depends(rate_limit_connect)])
        async def connect(...):
            pass
        ```
    """
    if prefix not in RateLimitPrefix.all_prefixes():
        raise ValueError(f"Unknown rate limit prefix '{prefix}'")

    async def rate_limit(
        request: Request,
        registry: Annotated[RateLimiterRegistry, Depends(get_rate_limiter)],
    ) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = get_client_ip(request)
        key = f"{prefix}{ip}"
        is_allowed, bucket = registry.acquire(key)

        info = bucket.info()
        request.state.rate_limit_info = info

        if not is_allowed:
            logger.warning(f"Rate limit exceeded. IP: {ip}, Key: {key}")
            raise TooManyRequestsException(
                detail=message,
                headers={
                    "X-RateLimit-Limit": str(info["limit"]),
                    "X-RateLimit-Remaining": str(info["remaining"]),
                },
            )

    return rate_limit


rate_limit_connect = create_rate_limit(
    RateLimitPrefix.WALLET_CONNECT,
    "Too many connection attempts. Please try again later.",
)

rate_limit_wallet = create_rate_limit(
    RateLimitPrefix.WALLET,
    "Rate limit exceeded. Please slow down your requests.",
)
