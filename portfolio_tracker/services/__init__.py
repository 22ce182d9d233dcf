"""Service modules"""
from .aggregator import PortfolioAggregator
from .balance_collector import BalanceCollector
from .currency import CurrencyConverter
from .price_resolver import PriceResolver
from .rate_cache import RateCache
from .tracker import Tracker

__all__ = [
    "BalanceCollector",
    "CurrencyConverter",
    "PortfolioAggregator",
    "PriceResolver",
    "RateCache",
    "Tracker",
]
