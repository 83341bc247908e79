from datetime import datetime

from pydantic import ConfigDict, Field

from wallet_gateway.schemas.base import BaseSchema


class SessionPayload(BaseSchema):
    """Identity and expiry carried inside a signed session token"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    address: str
    network_id: int = Field(alias="networkId")
    name: str
    issued_at: datetime = Field(alias="issuedAt")
    expires_at: datetime = Field(alias="expiresAt")
