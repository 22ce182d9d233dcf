"""Chain client protocol: native balance over node RPC."""
from typing import Protocol


class NativeBalanceSource(Protocol):
    """Abstract interface for reading a wallet's native (SOL) balance."""

    def ensure_credentials(self) -> None: ...

    async def get_balance(self, wallet_address: str) -> float: ...
