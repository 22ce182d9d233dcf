"""Price stage protocol: one link of the price fallback chain."""
from typing import Protocol

from ..models import PriceQuote


class PriceStage(Protocol):
    """Abstract interface for a source of USD quotes."""

    name: str

    async def fetch_quotes(self, asset_ids: list[str]) -> dict[str, PriceQuote]: ...
