"""Typed failure reasons raised by the portfolio engine."""
from __future__ import annotations


class PortfolioError(Exception):
    """Base class for all tracker errors."""


class ConfigurationError(PortfolioError):
    """A credential is missing or malformed. Aborts the whole cycle."""


class ProviderUnavailable(PortfolioError):
    """An external provider failed (network, timeout, non-2xx, bad payload)."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class PartialDataError(PortfolioError):
    """One wallet (or asset) failed while the rest of the cycle succeeded."""

    def __init__(self, scope: str, cause: Exception) -> None:
        super().__init__(f"{scope}: {cause}")
        self.scope = scope
        self.cause = cause


class ConversionUnavailable(PortfolioError):
    """No exchange rate could be obtained for a display currency."""
