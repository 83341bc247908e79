import os
import sys

import uvicorn

from wallet_gateway.core.config import settings

APP_URI = "wallet_gateway.main:app"


def main():
    is_linux = sys.platform.startswith("linux")

    if settings.debug:
        os.environ["PYTHONASYNCIODEBUG"] = "1"
        uvicorn.run(
            app=APP_URI,
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.reload_uvicorn,
            workers=settings.workers_count,
            loop="uvloop" if is_linux else "auto",
        )
    elif is_linux:
        from wallet_gateway.web import GatewayApplication

        GatewayApplication.from_settings(APP_URI).run()
    else:
        uvicorn.run(
            app=APP_URI,
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.reload_uvicorn,
            workers=settings.workers_count,
        )


if __name__ == "__main__":
    main()
