"""Token index protocol: fungible token balances per wallet."""
from typing import Protocol

from ..models import TokenBalance


class TokenIndexSource(Protocol):
    """Abstract interface for listing a wallet's token balances."""

    def ensure_credentials(self) -> None: ...

    async def get_token_balances(self, wallet_address: str) -> list[TokenBalance]: ...
