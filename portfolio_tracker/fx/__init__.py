"""Exchange-rate providers."""
from .exchange_rate_api import ExchangeRateApiClient

__all__ = ["ExchangeRateApiClient"]
