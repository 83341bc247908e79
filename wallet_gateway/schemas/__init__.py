from .base import BaseSchema
from .health_check import HealthCheckResponse
from .session import SessionPayload
from .wallet import (
    ConnectionRequest,
    ConnectResponse,
    DisconnectResponse,
    SessionResponse,
    SessionWallet,
    WalletInfo,
)

__all__ = [
    "BaseSchema",
    "HealthCheckResponse",
    "SessionPayload",
    "ConnectionRequest",
    "ConnectResponse",
    "DisconnectResponse",
    "SessionResponse",
    "SessionWallet",
    "WalletInfo",
]
