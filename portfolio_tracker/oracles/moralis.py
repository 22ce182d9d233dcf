"""Moralis price oracle: per-token last-resort quotes."""
from __future__ import annotations

import logging

from ..config import MoralisPriceConfig
from ..errors import PortfolioError
from ..indexers.moralis import MoralisClient
from ..models import PriceQuote

logger = logging.getLogger(__name__)


class MoralisOracle:
    """Final price stage. No batching: one request per token."""

    name = "moralis"

    def __init__(self, client: MoralisClient, config: MoralisPriceConfig) -> None:
        self._client = client
        self.timeout = config.timeout

    async def fetch_quotes(self, asset_ids: list[str]) -> dict[str, PriceQuote]:
        quotes: dict[str, PriceQuote] = {}
        if not asset_ids:
            return quotes

        if not self._client.has_valid_credentials:
            logger.warning(
                "Moralis API key missing or malformed, skipping %d tokens",
                len(asset_ids),
            )
            return quotes

        for mint in asset_ids:
            try:
                record = await self._client.get_token_price(mint, timeout=self.timeout)
            except PortfolioError as e:
                logger.info("Moralis: no price for %s (%s)", mint, e)
                continue

            try:
                price = float(record.get("usdPrice"))
            except (TypeError, ValueError):
                continue

            symbol = record.get("tokenSymbol") or "UNKNOWN"
            quotes[mint] = PriceQuote(
                asset_id=mint,
                price_usd=price,
                liquidity_usd=0.0,
                symbol=symbol,
                display_name=record.get("tokenName") or symbol,
                source=self.name,
            )
            logger.debug("Moralis price for %s: $%.6f (%s)", mint, price, symbol)

        logger.info("Moralis priced %d/%d tokens", len(quotes), len(asset_ids))
        return quotes
