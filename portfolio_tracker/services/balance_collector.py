"""Per-wallet balance collection from the RPC node and the token indexer."""
from __future__ import annotations

import logging

from ..interfaces.chain import NativeBalanceSource
from ..interfaces.token_index import TokenIndexSource
from ..models import WalletBalances

logger = logging.getLogger(__name__)


class BalanceCollector:
    """Collect native and token balances for one wallet.

    Provider errors propagate to the caller; the aggregator decides that a
    failing wallet contributes nothing to the cycle.
    """

    def __init__(
        self, native_source: NativeBalanceSource, token_source: TokenIndexSource
    ) -> None:
        self._native = native_source
        self._tokens = token_source

    def ensure_credentials(self) -> None:
        """Fail fast, before any network call, on a missing or bad credential."""
        self._native.ensure_credentials()
        self._tokens.ensure_credentials()

    async def collect(self, wallet_address: str) -> WalletBalances:
        self.ensure_credentials()
        logger.info("Processing wallet: %s", wallet_address)

        native_balance = await self._native.get_balance(wallet_address)
        token_balances = await self._tokens.get_token_balances(wallet_address)

        return WalletBalances(
            address=wallet_address,
            native_balance=native_balance,
            token_balances=tuple(t for t in token_balances if t.quantity > 0),
        )
