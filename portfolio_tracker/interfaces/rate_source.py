"""Exchange-rate source protocol."""
from typing import Protocol


class RateSource(Protocol):
    """Abstract interface for fetching USD-relative currency multipliers."""

    async def fetch_rates(self) -> dict[str, float]: ...
