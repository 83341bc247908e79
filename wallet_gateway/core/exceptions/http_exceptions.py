from typing import Any

from starlette import status

from wallet_gateway.core.exceptions.base import HTTPException


class TooManyRequestsException(HTTPException):
    def __init__(
        self,
        detail: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        A rate limit bucket ran dry.
        :param detail: Message for the client.
        :param headers: X-RateLimit-* headers describing the bucket.
        """

        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers=headers,
        )
