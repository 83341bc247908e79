from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from wallet_gateway.core.exceptions.gateway import GatewayError


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Translate a domain error into the `{success: false, error}` body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected "
            f"({exc.status_code}): {exc.message}"
        )

    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)  # type: ignore[arg-type]
