"""ExchangeRate-API client: USD-based currency multipliers."""
from __future__ import annotations

import logging

from .. import http
from ..config import ExchangeRatesConfig
from ..errors import ProviderUnavailable

logger = logging.getLogger(__name__)

PROVIDER = "exchangerate-api"


class ExchangeRateApiClient:
    """Fetch the latest USD rate table."""

    def __init__(self, config: ExchangeRatesConfig) -> None:
        self.url = config.url
        self.timeout = config.timeout

    async def fetch_rates(self) -> dict[str, float]:
        logger.info("Fetching fresh exchange rates from %s", self.url)
        data = await http.get_json(PROVIDER, self.url, timeout=self.timeout)

        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise ProviderUnavailable(PROVIDER, "Invalid API response format")

        try:
            return {str(code).upper(): float(rate) for code, rate in rates.items()}
        except (TypeError, ValueError) as e:
            raise ProviderUnavailable(PROVIDER, f"non-numeric rate: {e}") from e
