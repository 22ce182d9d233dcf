"""Protocol interfaces for the portfolio tracker."""
from .chain import NativeBalanceSource
from .notifier import Notifier
from .price_stage import PriceStage
from .rate_source import RateSource
from .store import KeyValueStore
from .token_index import TokenIndexSource

__all__ = [
    "KeyValueStore",
    "NativeBalanceSource",
    "Notifier",
    "PriceStage",
    "RateSource",
    "TokenIndexSource",
]
