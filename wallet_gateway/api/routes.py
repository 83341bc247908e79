from fastapi import APIRouter, status

from wallet_gateway.api.endpoints import wallet
from wallet_gateway.core import responses
from wallet_gateway.schemas import HealthCheckResponse

api_router = APIRouter()


@api_router.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health Check",
)
async def health_check():
    return {"status": "healthy"}


api_router.include_router(
    wallet.router,
    prefix="/api/wallet",
    tags=["Wallet"],
    responses={
        status.HTTP_429_TOO_MANY_REQUESTS: {
            "model": responses.TooManyRequestsResponse,
            "headers": {
                "X-RateLimit-Limit": {
                    "description": "Bucket capacity",
                    "schema": {"type": "integer", "example": 10},
                },
                "X-RateLimit-Remaining": {
                    "description": "Whole tokens left in the bucket",
                    "schema": {"type": "integer", "example": 0},
                },
            },
        },
    },
)
