from pydantic import ConfigDict, Field, field_validator

from wallet_gateway.schemas.base import BaseSchema


class WalletInfo(BaseSchema):
    """Wallet details sent by the browser bridge.

    Extra keys (address info, signed hash, ...) are kept for the verifier.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    address: str = Field(min_length=1)
    network_id: int = Field(default=0, alias="networkId")
    name: str | None = None

    @field_validator("address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("address must not be blank")
        return v

    @field_validator("network_id", mode="before")
    @classmethod
    def default_network_id(cls, v: int | None) -> int:
        return 0 if v is None else v


class ConnectionRequest(BaseSchema):
    """Body of POST /api/wallet/connect"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token: str = Field(min_length=1)
    wallet: WalletInfo
    return_url: str | None = Field(default=None, alias="returnUrl")


class ConnectResponse(BaseSchema):
    success: bool = True
    message: str = "Wallet connected successfully"
    return_url: str = Field(alias="returnUrl")


class DisconnectResponse(BaseSchema):
    success: bool = True
    message: str = "Wallet disconnected successfully"


class SessionWallet(BaseSchema):
    address: str
    network_id: int = Field(alias="networkId")
    name: str


class SessionResponse(BaseSchema):
    success: bool = True
    message: str = "Session is valid"
    wallet: SessionWallet
