from gunicorn.app.base import BaseApplication
from gunicorn.util import import_app

from wallet_gateway.core.config import settings


class GatewayApplication(BaseApplication):
    """Gunicorn application serving the wallet gateway with uvicorn workers."""

    def __init__(self, app_uri: str, options: dict | None = None):
        self.app_uri = app_uri
        self.options = options or {}
        super().__init__()

    @classmethod
    def from_settings(cls, app_uri: str = "wallet_gateway.main:app") -> "GatewayApplication":
        # Workers verify each other's sessions, so they need a shared SESSION_SECRET
        return cls(
            app_uri,
            {
                "bind": f"{settings.backend_host}:{settings.backend_port}",
                "workers": settings.workers_count,
                "worker_class": "uvicorn.workers.UvicornWorker",
                "forwarded_allow_ips": settings.trusted_proxies,
            },
        )

    def load_config(self):
        for key, value in self.options.items():
            if key in self.cfg.settings and value is not None:
                self.cfg.set(key.lower(), value)

    def load(self):
        return import_app(self.app_uri)
