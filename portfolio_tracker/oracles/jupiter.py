"""Jupiter price oracle: batched fallback quotes without liquidity."""
from __future__ import annotations

import logging

from .. import http
from ..config import JupiterConfig
from ..errors import ProviderUnavailable
from ..models import PriceQuote

logger = logging.getLogger(__name__)


class JupiterOracle:
    """Secondary price stage."""

    name = "jupiter"

    def __init__(self, config: JupiterConfig) -> None:
        self.url = config.url
        self.timeout = config.timeout

    async def fetch_quotes(self, asset_ids: list[str]) -> dict[str, PriceQuote]:
        quotes: dict[str, PriceQuote] = {}
        if not asset_ids:
            return quotes

        try:
            data = await http.get_json(
                self.name,
                self.url,
                timeout=self.timeout,
                params={"ids": ",".join(asset_ids)},
            )
        except ProviderUnavailable as e:
            logger.error("Error fetching prices from Jupiter: %s", e)
            return quotes

        entries = data.get("data") if isinstance(data, dict) else None
        wanted = set(asset_ids)
        for mint, record in (entries or {}).items():
            if mint not in wanted or not isinstance(record, dict):
                continue
            try:
                price = float(record.get("price"))
            except (TypeError, ValueError):
                continue

            symbol = record.get("mintSymbol") or ""
            quotes[mint] = PriceQuote(
                asset_id=mint,
                price_usd=price,
                liquidity_usd=0.0,
                symbol=symbol,
                display_name=symbol,
                source=self.name,
            )

        logger.info("Jupiter priced %d/%d tokens", len(quotes), len(asset_ids))
        return quotes
