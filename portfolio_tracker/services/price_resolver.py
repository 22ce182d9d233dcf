"""USD price resolution through an ordered chain of price stages."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..interfaces.price_stage import PriceStage
from ..models import PriceQuote, prefer_quote

logger = logging.getLogger(__name__)


class PriceResolver:
    """Query each stage in priority order for the ids still unresolved.

    Stages never raise into the caller: a failing stage is logged and counts
    as returning no quotes, so its ids fall through to the next stage. Ids
    left unresolved after the last stage are simply absent from the result.
    """

    def __init__(self, stages: Sequence[PriceStage]) -> None:
        self._stages = list(stages)

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    async def _run_stage(
        self, stage: PriceStage, asset_ids: list[str]
    ) -> dict[str, PriceQuote]:
        try:
            return await stage.fetch_quotes(asset_ids)
        except Exception as e:
            logger.error("Price stage %s failed: %s", stage.name, e)
            return {}

    async def resolve_prices(self, asset_ids: Iterable[str]) -> dict[str, PriceQuote]:
        # Sorted so that identical inputs issue identical requests.
        remaining = sorted(set(asset_ids))
        resolved: dict[str, PriceQuote] = {}

        for stage in self._stages:
            if not remaining:
                break

            logger.info("Requesting %d prices from %s", len(remaining), stage.name)
            quotes = await self._run_stage(stage, remaining)

            wanted = set(remaining)
            for asset_id, quote in quotes.items():
                if asset_id in wanted:
                    resolved[asset_id] = prefer_quote(resolved.get(asset_id), quote)

            remaining = [a for a in remaining if a not in resolved]
            if remaining:
                logger.info(
                    "Missing prices for %d tokens after %s", len(remaining), stage.name
                )

        if remaining:
            logger.warning(
                "No price found for %d tokens: %s", len(remaining), ", ".join(remaining)
            )
        return resolved
