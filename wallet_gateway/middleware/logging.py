import time
import uuid
from typing import Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from wallet_gateway.core.logger import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a short request ID and traces it.

    An X-Request-ID set by the reverse proxy is reused so gateway logs line
    up with the proxy's. The ID is echoed back in the response headers and
    bound to log records through `request_id_var`.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        logger.trace(
            f"{request.method} {request.url.path} - Client: {client_ip} - "
            f"User-Agent: {request.headers.get('user-agent', 'unknown')}"
        )

        try:
            response: Response = await call_next(request)

            logger.trace(
                f"{request.method} {request.url.path} - Status: {response.status_code} - "
                f"Time: {time.perf_counter() - start_time:.3f}s"
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        except Exception as e:
            # Bodies carry wallet tokens and signatures, only the query is logged
            logger.error(
                f"{request.method} {request.url.path} - Error: {e} - "
                f"Time: {time.perf_counter() - start_time:.3f}s",
                request_query_params=str(request.query_params),
            )
            raise
        finally:
            request_id_var.reset(token)
