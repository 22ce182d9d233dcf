"""DexScreener price oracle: batched, liquidity-ranked quotes."""
from __future__ import annotations

import logging
from typing import Any

from .. import http
from ..config import DexScreenerConfig
from ..errors import ProviderUnavailable
from ..models import PriceQuote, prefer_quote

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_pairs(
    pairs: list[dict[str, Any]], wanted: set[str]
) -> dict[str, PriceQuote]:
    """Reduce trading pairs to one quote per base token.

    The highest-liquidity pair wins; on equal liquidity the first pair seen
    is kept. Pairs whose base token was not requested are ignored.
    """
    quotes: dict[str, PriceQuote] = {}
    for pair in pairs:
        base = pair.get("baseToken") or {}
        address = base.get("address")
        if address not in wanted:
            continue

        price = _to_float(pair.get("priceUsd"))
        if price is None:
            continue
        liquidity = _to_float((pair.get("liquidity") or {}).get("usd")) or 0.0

        candidate = PriceQuote(
            asset_id=address,
            price_usd=price,
            liquidity_usd=liquidity,
            symbol=base.get("symbol", ""),
            display_name=base.get("name", ""),
            source=DexScreenerOracle.name,
        )
        quotes[address] = prefer_quote(quotes.get(address), candidate)
    return quotes


class DexScreenerOracle:
    """Primary price stage."""

    name = "dexscreener"

    def __init__(self, config: DexScreenerConfig) -> None:
        self.url = config.url.rstrip("/")
        self.timeout = config.timeout
        self.batch_size = config.batch_size

    async def _fetch_batch(self, batch: list[str]) -> dict[str, PriceQuote]:
        data = await http.get_json(
            self.name, f"{self.url}/{','.join(batch)}", timeout=self.timeout
        )
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "response is not an object")
        pairs = data.get("pairs") or []
        logger.debug("DexScreener returned %d pairs for %d tokens", len(pairs), len(batch))
        return parse_pairs(pairs, set(batch))

    async def fetch_quotes(self, asset_ids: list[str]) -> dict[str, PriceQuote]:
        """Fetch quotes in batches. A failed batch yields no quotes."""
        quotes: dict[str, PriceQuote] = {}
        if not asset_ids:
            return quotes

        for start in range(0, len(asset_ids), self.batch_size):
            batch = asset_ids[start:start + self.batch_size]
            try:
                quotes.update(await self._fetch_batch(batch))
            except ProviderUnavailable as e:
                logger.error("Error fetching prices from DexScreener: %s", e)

        logger.info("DexScreener priced %d/%d tokens", len(quotes), len(asset_ids))
        return quotes
