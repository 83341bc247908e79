import logging
import os
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_DIR = Path(__file__).parent.parent.parent
PROJECT_TOML_PATH = PROJECT_DIR / "pyproject.toml"

with open(PROJECT_TOML_PATH, "rb") as f:
    PYPROJECT_CONTENT = tomllib.load(f)["project"]


class Environment(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    STG = "stg"
    PRD = "prd"


# Environments that run behind HTTPS on the public domain
PRODUCTION_ENVIRONMENTS = {Environment.STG, Environment.PRD}


def convert_app_name(s: str) -> str:
    return " ".join(word.capitalize() for word in s.split("-"))


def split_csv(value: str) -> list[str]:
    """Split a comma-separated setting, dropping blanks and duplicates while keeping order."""
    items: list[str] = []
    for item in value.split(","):
        item = item.strip()
        if item and item not in items:
            items.append(item)
    return items


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=False,
        extra="ignore",
    )

    # App variables
    app_name: str = PYPROJECT_CONTENT["name"]
    app_title: str = os.getenv("APP_TITLE", convert_app_name(app_name))
    app_version: str = PYPROJECT_CONTENT["version"]
    app_description: str = PYPROJECT_CONTENT["description"]

    backend_host: str = "0.0.0.0"
    backend_port: int = 8000

    # Number of workers for uvicorn
    workers_count: int = 1

    # Enable uvicorn reloading
    reload_uvicorn: bool = False

    # Current working environment
    current_environment: Environment = Environment.LOCAL
    log_level: int = logging.INFO
    debug: bool = False

    # Session token settings
    session_secret: SecretStr | None = None
    session_ttl_seconds: int = 60 * 60 * 2
    session_cookie_name: str = "wallet_session"
    csrf_cookie_name: str = "csrf_token"
    cookie_domain: str | None = ".arpradio.media"  # Parent domain, production only

    # Origins and redirects
    site_root: str = "https://arpradio.media"
    allowed_origins: str = "https://arpradio.media,https://www.arpradio.media"
    dev_origin: str = "http://localhost:3000"
    allowed_return_urls: str = "https://arpradio.media,https://www.arpradio.media"
    no_auth_path: str = "/no-auth"

    # Rate limiting settings (token bucket)
    rate_limit_enabled: bool = True
    rate_limit_capacity: float = 10  # Burst size per key
    rate_limit_fill_rate: float = 1  # Tokens added per second
    rate_limit_max_keys: int = 10_000  # Registry size that triggers pruning
    rate_limit_max_idle_seconds: float = 600
    rate_limit_prune_interval_seconds: float = 60  # Minimum gap between pruning scans

    # Peers allowed to set X-Forwarded-For: comma-separated IPs or CIDR networks
    trusted_proxies: str = "127.0.0.1"

    # Signature verifier, "module:attribute"
    signature_verifier: str | None = None

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.current_environment in PRODUCTION_ENVIRONMENTS

    @computed_field
    @property
    def allowed_origins_list(self) -> list[str]:
        """
        Parse allowed origins, adding the local dev origin outside production.
        """
        origins = split_csv(self.allowed_origins)

        if not self.is_production and self.dev_origin not in origins:
            origins.append(self.dev_origin)

        return origins

    @computed_field
    @property
    def allowed_return_urls_list(self) -> list[str]:
        """
        Parse allowed return URL prefixes from a comma-separated string.
        """
        return split_csv(self.allowed_return_urls)

    @computed_field
    @property
    def trusted_proxies_list(self) -> list[str]:
        return split_csv(self.trusted_proxies)


settings = Settings()  # type: ignore
