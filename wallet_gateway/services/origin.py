from wallet_gateway.core.config import settings


class OriginGuard:
    """
    Allow-list checks for request origins and post-login return URLs.

    Example:
        ```python
        guard = OriginGuard(
            allowed_origins=["https://site.example"],
            allowed_return_urls=["https://site.example"],
            default_url="https://site.example",
        )
        guard.sanitize_return_url("https://evil.example/x")  # "https://site.example"
        ```
    """

    def __init__(
        self,
        allowed_origins: list[str],
        allowed_return_urls: list[str],
        default_url: str,
    ):
        self.allowed_origins = frozenset(allowed_origins)
        self.allowed_return_urls = tuple(allowed_return_urls)
        self.default_url = default_url

    @classmethod
    def from_settings(cls) -> "OriginGuard":
        return cls(
            allowed_origins=settings.allowed_origins_list,
            allowed_return_urls=settings.allowed_return_urls_list,
            default_url=settings.site_root,
        )

    def validate_origin(self, origin: str | None) -> bool:
        """Exact match against the allow-list. No prefix or wildcard matching."""
        if not origin:
            return False
        return origin in self.allowed_origins

    def sanitize_return_url(
        self,
        candidate: str | None,
        allowed_prefixes: list[str] | tuple[str, ...] | None = None,
    ) -> str:
        """
        Return `candidate` if it starts with an allowed absolute-URL prefix,
        otherwise the site root. Guards the connect flow against open redirects.
        """
        prefixes = self.allowed_return_urls if allowed_prefixes is None else allowed_prefixes

        if not candidate:
            return self.default_url

        for prefix in prefixes:
            if not candidate.startswith(prefix):
                continue
            # "https://site.example.evil.com" must not pass for "https://site.example"
            rest = candidate[len(prefix) :]
            if not rest or prefix.endswith("/") or rest[0] in "/?#":
                return candidate

        return self.default_url
