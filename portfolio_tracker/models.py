"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

# Wrapped SOL mint, used as the asset identifier of the native balance.
NATIVE_ASSET_ID = "So11111111111111111111111111111111111111112"
NATIVE_SYMBOL = "SOL"
NATIVE_NAME = "Solana"
NATIVE_DECIMALS = 9
LAMPORTS_PER_SOL = 1_000_000_000

BASE_CURRENCY = "USD"


@dataclass(frozen=True)
class Wallet:
    """A tracked wallet. Identity is the address."""

    address: str
    id: str = ""
    display_name: str = ""
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "display_name": self.display_name,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Wallet:
        return cls(
            address=raw.get("address", ""),
            id=raw.get("id", ""),
            display_name=raw.get("display_name", ""),
            enabled=bool(raw.get("enabled", True)),
        )


@dataclass(frozen=True)
class TokenBalance:
    """One token entry reported by the token-index provider."""

    asset_id: str
    quantity: float
    symbol: str | None = None
    display_name: str | None = None
    decimals: int | None = None


@dataclass(frozen=True)
class WalletBalances:
    """Everything a single wallet holds, before pricing."""

    address: str
    native_balance: float
    token_balances: tuple[TokenBalance, ...] = ()


@dataclass(frozen=True)
class PriceQuote:
    """A USD price for one asset from one provider."""

    asset_id: str
    price_usd: float
    liquidity_usd: float = 0.0
    symbol: str = ""
    display_name: str = ""
    source: str = ""


def prefer_quote(existing: PriceQuote | None, candidate: PriceQuote) -> PriceQuote:
    """Pick between two quotes for one asset: deeper liquidity wins, ties keep the first."""
    if existing is None or candidate.liquidity_usd > existing.liquidity_usd:
        return candidate
    return existing


@dataclass(frozen=True)
class Holding:
    """A priced position in one asset, possibly merged across wallets."""

    asset_id: str
    symbol: str
    display_name: str
    quantity: float
    unit_price_usd: float
    value_usd: float
    decimals: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "symbol": self.symbol,
            "display_name": self.display_name,
            "quantity": self.quantity,
            "unit_price_usd": self.unit_price_usd,
            "value_usd": self.value_usd,
            "decimals": self.decimals,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Holding:
        return cls(
            asset_id=raw["asset_id"],
            symbol=raw.get("symbol", ""),
            display_name=raw.get("display_name", ""),
            quantity=float(raw.get("quantity", 0.0)),
            unit_price_usd=float(raw.get("unit_price_usd", 0.0)),
            value_usd=float(raw.get("value_usd", 0.0)),
            decimals=int(raw.get("decimals", 0)),
        )


@dataclass(frozen=True)
class PortfolioSnapshot:
    """One fully computed aggregation result.

    ``total_value_usd``, ``unit_price_usd`` and ``value_usd`` are expressed in
    ``currency``; snapshots produced by the aggregator (and the ones that get
    persisted) are always in USD.
    """

    total_value_usd: float
    holdings: tuple[Holding, ...]
    captured_at: datetime
    currency: str = BASE_CURRENCY

    @classmethod
    def empty(cls) -> PortfolioSnapshot:
        return cls(
            total_value_usd=0.0,
            holdings=(),
            captured_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_value_usd": self.total_value_usd,
            "holdings": [h.to_dict() for h in self.holdings],
            "captured_at": self.captured_at.isoformat(),
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PortfolioSnapshot:
        return cls(
            total_value_usd=float(raw.get("total_value_usd", 0.0)),
            holdings=tuple(Holding.from_dict(h) for h in raw.get("holdings", [])),
            captured_at=datetime.fromisoformat(raw["captured_at"]),
            currency=raw.get("currency", BASE_CURRENCY),
        )


@dataclass(frozen=True)
class ExchangeRateTable:
    """USD-based multipliers valid for one calendar day."""

    rates: Mapping[str, float]
    fetched_on: date
    base_currency: str = BASE_CURRENCY
    is_fallback: bool = False

    def __post_init__(self) -> None:
        rates = {str(code).upper(): float(rate) for code, rate in self.rates.items()}
        rates[BASE_CURRENCY] = 1.0
        object.__setattr__(self, "rates", MappingProxyType(rates))

    def rate_for(self, currency: str) -> float | None:
        return self.rates.get(currency.upper())
