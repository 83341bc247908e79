from typing import Literal

from fastapi import Response

from wallet_gateway.core.config import settings


class SessionCookieWriter:
    """
    Sets and clears the wallet session and CSRF cookies.

    Production: Secure, SameSite=strict, scoped to the parent domain.
    Development: not Secure, SameSite=lax, host-only.
    """

    def __init__(
        self,
        session_cookie_name: str,
        csrf_cookie_name: str,
        max_age: int,
        secure: bool,
        domain: str | None = None,
    ):
        self.session_cookie_name = session_cookie_name
        self.csrf_cookie_name = csrf_cookie_name
        self.max_age = max_age
        self.secure = secure
        self.domain = domain

    @classmethod
    def from_settings(cls) -> "SessionCookieWriter":
        return cls(
            session_cookie_name=settings.session_cookie_name,
            csrf_cookie_name=settings.csrf_cookie_name,
            max_age=settings.session_ttl_seconds,
            secure=settings.is_production,
            domain=settings.cookie_domain if settings.is_production else None,
        )

    @property
    def samesite(self) -> Literal["strict", "lax"]:
        return "strict" if self.secure else "lax"

    def set_session(self, response: Response, session_token: str, csrf_token: str) -> None:
        response.set_cookie(
            key=self.session_cookie_name,
            value=session_token,
            max_age=self.max_age,
            path="/",
            domain=self.domain,
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,
        )
        response.set_cookie(
            key=self.csrf_cookie_name,
            value=csrf_token,
            max_age=self.max_age,
            path="/",
            domain=self.domain,
            secure=self.secure,
            httponly=False,  # Must be readable by JavaScript
            samesite=self.samesite,
        )

    def clear(self, response: Response) -> None:
        for name, httponly in ((self.session_cookie_name, True), (self.csrf_cookie_name, False)):
            response.delete_cookie(
                key=name,
                path="/",
                domain=self.domain,
                secure=self.secure,
                httponly=httponly,
                samesite=self.samesite,
            )
