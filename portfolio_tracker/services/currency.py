"""Projection of USD snapshots into a display currency."""
from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import ConversionUnavailable
from ..models import BASE_CURRENCY, PortfolioSnapshot
from .rate_cache import RateCache

logger = logging.getLogger(__name__)

class CurrencyConverter:
    """Convert snapshots without ever touching the USD original."""

    def __init__(self, rate_cache: RateCache) -> None:
        self._rates = rate_cache

    async def convert(
        self, snapshot: PortfolioSnapshot, target_currency: str
    ) -> PortfolioSnapshot:
        target = target_currency.upper()
        if target == BASE_CURRENCY:
            return snapshot
        if snapshot.currency != BASE_CURRENCY:
            raise ValueError(
                f"Snapshot is already in {snapshot.currency}; convert the USD original"
            )

        try:
            rate = await self._rates.get_rate(target)
        except ConversionUnavailable as e:
            logger.warning("%s, keeping USD", e)
            return snapshot

        return replace(
            snapshot,
            total_value_usd=snapshot.total_value_usd * rate,
            holdings=tuple(
                replace(
                    h,
                    unit_price_usd=h.unit_price_usd * rate,
                    value_usd=h.value_usd * rate,
                )
                for h in snapshot.holdings
            ),
            currency=target,
        )
