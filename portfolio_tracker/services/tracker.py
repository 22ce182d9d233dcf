"""Refresh orchestration: aggregation cycles, persistence and notifications."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..chains.solana import SolanaClient
from ..config import AppConfig
from ..errors import ConfigurationError, PartialDataError
from ..formatting import format_total
from ..fx import ExchangeRateApiClient
from ..indexers import MoralisClient
from ..interfaces.notifier import Notifier
from ..interfaces.store import KeyValueStore
from ..models import PortfolioSnapshot, Wallet
from ..notifications import EmailNotifier, TelegramNotifier
from ..oracles import DexScreenerOracle, JupiterOracle, MoralisOracle
from ..storage import JsonFileStore, WalletRegistry
from .aggregator import PortfolioAggregator, unique_enabled
from .balance_collector import BalanceCollector
from .currency import CurrencyConverter
from .price_resolver import PriceResolver
from .rate_cache import RateCache

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "last-snapshot"
CURRENCY_KEY = "currency"


class Tracker:
    """Runs refresh cycles for every tracked wallet and publishes the total."""

    def __init__(self, config: AppConfig, store: KeyValueStore | None = None) -> None:
        self._config = config
        self._store: KeyValueStore = (
            store if store is not None else JsonFileStore(config.tracker.storage_path)
        )
        self.registry = WalletRegistry(self._store)

        # Providers
        moralis = MoralisClient(config.providers.token_index)
        self._collector = BalanceCollector(
            SolanaClient(config.providers.rpc), moralis
        )
        self._resolver = PriceResolver(
            [
                DexScreenerOracle(config.prices.dexscreener),
                JupiterOracle(config.prices.jupiter),
                MoralisOracle(moralis, config.prices.moralis),
            ]
        )
        self._aggregator = PortfolioAggregator(
            self._collector, self._resolver, config.tracker.max_concurrency
        )
        self.rate_cache = RateCache(
            ExchangeRateApiClient(config.exchange_rates), self._store
        )
        self._converter = CurrencyConverter(self.rate_cache)

        # Notifiers
        self._notifiers: list[Notifier] = []
        if config.notifications.telegram.enabled:
            self._notifiers.append(TelegramNotifier(config.notifications.telegram))
        if config.notifications.email.enabled:
            self._notifiers.append(EmailNotifier(config.notifications.email))

        self._in_flight: dict[frozenset[str], asyncio.Task[PortfolioSnapshot]] = {}
        self._last_snapshot: PortfolioSnapshot | None = self._load_snapshot()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _load_snapshot(self) -> PortfolioSnapshot | None:
        raw: Any = self._store.get(SNAPSHOT_KEY)
        if not raw:
            return None
        try:
            return PortfolioSnapshot.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable stored snapshot: %s", e)
            return None

    @property
    def last_snapshot(self) -> PortfolioSnapshot | None:
        return self._last_snapshot

    @property
    def last_failures(self) -> list[PartialDataError]:
        """Wallets dropped from the most recent cycle."""
        return list(self._aggregator.last_failures)

    def wallets(self) -> list[Wallet]:
        """Configured wallets followed by registry wallets."""
        return list(self._config.wallets) + self.registry.list_wallets()

    @property
    def display_currency(self) -> str:
        return str(
            self._store.get(CURRENCY_KEY, self._config.tracker.display_currency)
        ).upper()

    def set_display_currency(self, currency: str) -> None:
        self._store.set(CURRENCY_KEY, currency.upper())

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def _run_cycle(self, wallets: list[Wallet]) -> PortfolioSnapshot:
        snapshot = await self._aggregator.aggregate(wallets)
        self._last_snapshot = snapshot
        self._store.set(SNAPSHOT_KEY, snapshot.to_dict())
        return snapshot

    async def refresh(self) -> PortfolioSnapshot:
        """Run one aggregation cycle, or join the identical one already running.

        Raises:
            ConfigurationError: credentials are missing or malformed. The
                previous snapshot is kept.
        """
        wallets = unique_enabled(self.wallets())
        key = frozenset(w.address for w in wallets)

        task = self._in_flight.get(key)
        if task is not None:
            logger.info("Refresh already running for this wallet set, joining it")
            return await task

        task = asyncio.ensure_future(self._run_cycle(wallets))
        self._in_flight[key] = task
        try:
            return await task
        finally:
            self._in_flight.pop(key, None)

    async def display_snapshot(
        self, currency: str | None = None
    ) -> PortfolioSnapshot | None:
        """Last snapshot projected into the display currency."""
        if self._last_snapshot is None:
            return None
        return await self._converter.convert(
            self._last_snapshot, currency or self.display_currency
        )

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def _send_update(self, snapshot: PortfolioSnapshot) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_update(snapshot, silent=True)
            except Exception as e:
                logger.error("Notifier send_update failed: %s", e)

    async def _send_report(self, snapshot: PortfolioSnapshot, failed: int) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_report(snapshot, failed=failed)
            except Exception as e:
                logger.error("Notifier send_report failed: %s", e)

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def check_and_notify(self) -> PortfolioSnapshot | None:
        """Refresh, convert to the display currency and push the total."""
        await self.refresh()
        converted = await self.display_snapshot()
        if converted is None:
            return None

        logger.info("Portfolio total: %s", format_total(converted))
        await self._send_update(converted)
        return converted

    async def generate_report(self) -> PortfolioSnapshot | None:
        """Refresh and send the holdings breakdown."""
        await self.refresh()
        converted = await self.display_snapshot()
        if converted is None:
            return None

        await self._send_report(converted, len(self.last_failures))
        logger.info("Portfolio report sent")
        return converted

    async def run_continuous(self, refresh_interval_minutes: int | None = None) -> None:
        """Run the refresh loop. A failed cycle keeps the previous snapshot."""
        interval = refresh_interval_minutes or self._config.tracker.refresh_interval_minutes
        logger.info("Starting portfolio refresh loop (every %d minutes)", interval)

        while True:
            try:
                await self.check_and_notify()
            except ConfigurationError as e:
                logger.error("Configuration error, skipping cycle: %s", e)
            except Exception as e:
                logger.error("Error in refresh loop: %s", e)
            await asyncio.sleep(interval * 60)
