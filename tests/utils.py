from typing import Any

from faker import Faker

from tests.schemas import WalletData
from wallet_gateway.services.verifier import SignatureVerifier, VerificationResult


def generate_wallet_data(network_id: int = 1, name: str = "Eternl") -> WalletData:
    """
    Generate a random bech32-looking wallet address with network details
    Returns:
        WalletData: Address, network ID and wallet name
    """
    faker = Faker()
    address = "addr1" + faker.pystr(min_chars=50, max_chars=50).lower()
    return WalletData(address=address, networkId=network_id, name=name)


class StubVerifier(SignatureVerifier):
    """Signature verifier returning a fixed result and recording its calls."""

    def __init__(
        self,
        is_valid: bool = True,
        message: str = "Signature verified successfully",
        shape_ok: bool | None = None,
        error: Exception | None = None,
    ):
        self.result = VerificationResult(is_valid=is_valid, message=message)
        self.shape_ok = shape_ok
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def validate_shape(self, connection_data: dict[str, Any]) -> bool:
        if self.shape_ok is None:
            return super().validate_shape(connection_data)
        return self.shape_ok

    async def verify_connection(self, connection_data: dict[str, Any]) -> VerificationResult:
        self.calls.append(connection_data)
        if self.error is not None:
            raise self.error
        return self.result


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
