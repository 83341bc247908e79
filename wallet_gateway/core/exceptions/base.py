from typing import Any

from fastapi import HTTPException as FastAPIHTTPException


class CustomException(Exception):
    """
    Base for gateway exceptions.

    `exception` keeps the underlying cause for logs; it is never sent to
    clients unless a subclass opts in.
    """

    def __init__(self, message: str, exception: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.exception = exception

    def __str__(self):
        if self.exception:
            return f"{self.message}\nException: {self.exception}"

        return self.message


class HTTPException(FastAPIHTTPException):
    """FastAPI HTTPException with keyword-friendly defaults, answered as `{detail}`."""

    def __init__(
        self,
        status_code: int,
        detail: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)
