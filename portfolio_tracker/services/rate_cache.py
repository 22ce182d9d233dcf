"""Daily exchange-rate cache."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from ..errors import ConversionUnavailable, PortfolioError
from ..interfaces.rate_source import RateSource
from ..interfaces.store import KeyValueStore
from ..models import ExchangeRateTable

logger = logging.getLogger(__name__)

RATES_KEY = "exchange-rates"

# Approximate rates used when the provider is unreachable. Never persisted.
DEFAULT_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.85,
    "GBP": 0.73,
    "JPY": 110.0,
    "CAD": 1.25,
    "AUD": 1.35,
    "CHF": 0.92,
    "CNY": 6.45,
}


class RateCache:
    """One exchange-rate table per local calendar day.

    The cache holds a single entry that is valid while ``entry.fetched_on``
    equals today's date. A fetch failure returns the default table without
    caching it, so the next call tries the provider again.
    """

    def __init__(
        self,
        source: RateSource,
        store: KeyValueStore,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._source = source
        self._store = store
        self._today = today
        self._entry: ExchangeRateTable | None = None

    def _is_valid(self, entry: ExchangeRateTable) -> bool:
        return entry.fetched_on == self._today()

    def _load_persisted(self) -> ExchangeRateTable | None:
        raw: Any = self._store.get(RATES_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return ExchangeRateTable(
                rates=raw["rates"], fetched_on=date.fromisoformat(raw["date"])
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Error parsing cached exchange rates: %s", e)
            return None

    def _persist(self, table: ExchangeRateTable) -> None:
        self._store.set(
            RATES_KEY,
            {"date": table.fetched_on.isoformat(), "rates": dict(table.rates)},
        )
        logger.info("Exchange rates cached for %s", table.fetched_on.isoformat())

    async def get_rates(self) -> ExchangeRateTable:
        if self._entry is not None and self._is_valid(self._entry):
            return self._entry

        persisted = self._load_persisted()
        if persisted is not None and self._is_valid(persisted):
            logger.debug("Using cached exchange rates from today")
            self._entry = persisted
            return persisted

        today = self._today()
        try:
            rates = await self._source.fetch_rates()
        except PortfolioError as e:
            logger.error("Error fetching exchange rates: %s", e)
            logger.warning("Falling back to default rates")
            return ExchangeRateTable(
                rates=dict(DEFAULT_RATES), fetched_on=today, is_fallback=True
            )

        table = ExchangeRateTable(rates=rates, fetched_on=today)
        self._entry = table
        self._persist(table)
        return table

    async def get_rate(self, currency: str) -> float:
        """Rate for one currency.

        Raises:
            ConversionUnavailable: the currency is not in today's table.
        """
        table = await self.get_rates()
        rate = table.rate_for(currency)
        if rate is None:
            raise ConversionUnavailable(f"Exchange rate not found for {currency}")
        return rate

    def clear(self) -> None:
        self._entry = None
        self._store.remove(RATES_KEY)
        logger.info("Exchange rate cache cleared")
