"""Portfolio aggregation: collect, price once, merge, total, sort."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from ..errors import ConfigurationError, PartialDataError
from ..models import (
    NATIVE_ASSET_ID,
    NATIVE_DECIMALS,
    NATIVE_NAME,
    NATIVE_SYMBOL,
    Holding,
    PortfolioSnapshot,
    PriceQuote,
    Wallet,
    WalletBalances,
)
from .balance_collector import BalanceCollector
from .price_resolver import PriceResolver

logger = logging.getLogger(__name__)

UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"
DEFAULT_TOKEN_DECIMALS = 6


def unique_enabled(wallets: Iterable[Wallet]) -> list[Wallet]:
    """Enabled wallets, first occurrence of each address only."""
    seen: set[str] = set()
    result: list[Wallet] = []
    for wallet in wallets:
        if not wallet.enabled:
            continue
        if wallet.address in seen:
            logger.debug("Skipping duplicate wallet: %s", wallet.address)
            continue
        seen.add(wallet.address)
        result.append(wallet)
    return result


def holding_key(holding: Holding) -> str:
    """Merge key: the symbol when known, otherwise the asset id."""
    if holding.symbol and holding.symbol != UNKNOWN_SYMBOL:
        return holding.symbol
    return holding.asset_id


def merge_holdings(a: Holding, b: Holding) -> Holding:
    """Combine two holdings of the same asset.

    Quantity and value are summed. The native asset always supplies identity
    and unit price; between two tokens the smaller asset id does. Either way
    the operation stays commutative as well as associative.
    """
    if NATIVE_ASSET_ID in (a.asset_id, b.asset_id):
        primary = a if a.asset_id == NATIVE_ASSET_ID else b
    else:
        primary = a if a.asset_id <= b.asset_id else b
    return Holding(
        asset_id=primary.asset_id,
        symbol=primary.symbol,
        display_name=primary.display_name,
        quantity=a.quantity + b.quantity,
        unit_price_usd=primary.unit_price_usd,
        value_usd=a.value_usd + b.value_usd,
        decimals=primary.decimals,
    )


def wallet_holdings(
    balances: WalletBalances, prices: dict[str, PriceQuote]
) -> list[Holding]:
    """Price one wallet's balances. Unpriced assets are valued at 0."""
    holdings: list[Holding] = []

    if balances.native_balance > 0:
        quote = prices.get(NATIVE_ASSET_ID)
        price = quote.price_usd if quote else 0.0
        holdings.append(
            Holding(
                asset_id=NATIVE_ASSET_ID,
                symbol=NATIVE_SYMBOL,
                display_name=NATIVE_NAME,
                quantity=balances.native_balance,
                unit_price_usd=price,
                value_usd=balances.native_balance * price,
                decimals=NATIVE_DECIMALS,
            )
        )

    for token in balances.token_balances:
        if token.quantity <= 0:
            continue
        quote = prices.get(token.asset_id)
        price = quote.price_usd if quote else 0.0
        # Balance-provider metadata takes precedence over the price source's.
        name = token.display_name or (quote.display_name if quote else "") or UNKNOWN_NAME
        holdings.append(
            Holding(
                asset_id=token.asset_id,
                symbol=token.symbol or UNKNOWN_SYMBOL,
                display_name=name,
                quantity=token.quantity,
                unit_price_usd=price,
                value_usd=token.quantity * price,
                decimals=(
                    token.decimals if token.decimals is not None else DEFAULT_TOKEN_DECIMALS
                ),
            )
        )

    return holdings


def build_snapshot(
    per_wallet: Iterable[WalletBalances],
    prices: dict[str, PriceQuote],
    captured_at: datetime | None = None,
) -> PortfolioSnapshot:
    """Deterministic, serial merge of already-collected wallet balances."""
    merged: dict[str, Holding] = {}
    for balances in per_wallet:
        for holding in wallet_holdings(balances, prices):
            key = holding_key(holding)
            existing = merged.get(key)
            merged[key] = merge_holdings(existing, holding) if existing else holding

    holdings = sorted(
        merged.values(), key=lambda h: (-h.value_usd, h.symbol, h.asset_id)
    )
    total = sum(h.value_usd for h in holdings)

    return PortfolioSnapshot(
        total_value_usd=total,
        holdings=tuple(holdings),
        captured_at=captured_at or datetime.now(timezone.utc),
    )


class PortfolioAggregator:
    """Produce a USD snapshot for a set of wallets."""

    def __init__(
        self,
        collector: BalanceCollector,
        resolver: PriceResolver,
        max_concurrency: int = 4,
    ) -> None:
        self._collector = collector
        self._resolver = resolver
        self._max_concurrency = max(1, max_concurrency)
        self.last_failures: list[PartialDataError] = []

    async def _collect_all(self, wallets: list[Wallet]) -> list[WalletBalances | None]:
        semaphore = asyncio.Semaphore(self._max_concurrency)
        failures: list[PartialDataError] = []

        async def collect_one(wallet: Wallet) -> WalletBalances | None:
            async with semaphore:
                try:
                    return await self._collector.collect(wallet.address)
                except ConfigurationError:
                    raise
                except Exception as e:
                    failure = PartialDataError(f"wallet {wallet.address}", e)
                    logger.error("Error processing wallet %s: %s", wallet.address, e)
                    failures.append(failure)
                    return None

        # gather keeps input order, so the merge below is order-stable. Every
        # task settles before a credential failure is re-raised.
        results = await asyncio.gather(
            *(collect_one(w) for w in wallets), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        self.last_failures = failures
        return list(results)

    async def aggregate(self, wallets: Iterable[Wallet]) -> PortfolioSnapshot:
        """Run one aggregation cycle.

        Raises:
            ConfigurationError: a provider credential is missing or malformed.
        """
        self.last_failures = []
        active = unique_enabled(wallets)
        if not active:
            logger.info("No enabled wallets, returning empty portfolio")
            return PortfolioSnapshot.empty()

        self._collector.ensure_credentials()

        collected = [b for b in await self._collect_all(active) if b is not None]

        asset_ids: set[str] = set()
        for balances in collected:
            if balances.native_balance > 0:
                asset_ids.add(NATIVE_ASSET_ID)
            asset_ids.update(t.asset_id for t in balances.token_balances)

        prices = await self._resolver.resolve_prices(asset_ids) if asset_ids else {}
        snapshot = build_snapshot(collected, prices)

        logger.info(
            "Portfolio total value: $%.2f across %d assets (%d/%d wallets)",
            snapshot.total_value_usd,
            len(snapshot.holdings),
            len(collected),
            len(active),
        )
        return snapshot
