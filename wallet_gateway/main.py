from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from wallet_gateway.api.routes import api_router
from wallet_gateway.core.config import Environment, settings
from wallet_gateway.core.exceptions.handlers import register_exception_handlers
from wallet_gateway.core.logger import configure_uvicorn_logging, setup_logger, shutdown_logger
from wallet_gateway.middleware.csrf import CSRFMiddleware
from wallet_gateway.middleware.gateway import GatewayMiddleware
from wallet_gateway.middleware.logging import LoggingMiddleware
from wallet_gateway.middleware.rate_limit import RateLimitHeaderMiddleware
from wallet_gateway.services.cookies import SessionCookieWriter
from wallet_gateway.services.csrf import CsrfGuard
from wallet_gateway.services.origin import OriginGuard
from wallet_gateway.services.rate_limiter import RateLimiterRegistry
from wallet_gateway.services.session_codec import SessionCodec
from wallet_gateway.services.verifier import load_signature_verifier


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""

    setup_logger()
    configure_uvicorn_logging()

    logger.success(
        f"Wallet gateway ready | Environment: {settings.current_environment.value} | "
        f"Verifier: {type(app.state.signature_verifier).__name__}"
    )

    yield  # Application runs here

    logger.info(f"Rate limit buckets at shutdown: {len(app.state.rate_limiter)}")
    shutdown_logger()


ALLOWED_ENVIRONMENTS = {Environment.LOCAL, Environment.DEV, Environment.STG}

app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description=settings.app_description,
    openapi_url=("/openapi.json" if settings.current_environment in ALLOWED_ENVIRONMENTS else None),
    docs_url="/docs" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    redoc_url="/redoc" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    lifespan=lifespan,
    generate_unique_id_function=lambda route: f"{route.tags[0]}-{route.name}",
)

# Process-wide components, built once. A missing session secret in stg/prd
# fails here, before the app accepts traffic.
app.state.session_codec = SessionCodec.from_settings()
app.state.rate_limiter = RateLimiterRegistry.from_settings()
app.state.origin_guard = OriginGuard.from_settings()
app.state.csrf_guard = CsrfGuard()
app.state.cookie_writer = SessionCookieWriter.from_settings()
app.state.signature_verifier = load_signature_verifier()

register_exception_handlers(app)

# Last added runs first: CORS -> logging -> gateway -> CSRF -> rate limit headers
app.add_middleware(RateLimitHeaderMiddleware)
app.add_middleware(
    CSRFMiddleware,
    guard=app.state.csrf_guard,
    cookie_name=settings.csrf_cookie_name,
)
app.add_middleware(
    GatewayMiddleware,
    codec=app.state.session_codec,
    session_cookie_name=settings.session_cookie_name,
    no_auth_path=settings.no_auth_path,
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-CSRF-Token"],
)

app.include_router(api_router)
