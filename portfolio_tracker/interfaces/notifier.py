"""Notifier protocol: notification channel abstraction."""
from typing import Protocol

from ..models import PortfolioSnapshot


class Notifier(Protocol):
    """Abstract interface for pushing portfolio updates.

    Channels receive the snapshot already projected into the display
    currency and render it in their own format.
    """

    async def send_update(self, snapshot: PortfolioSnapshot, silent: bool = True) -> bool: ...

    async def send_report(self, snapshot: PortfolioSnapshot, failed: int = 0) -> bool: ...
