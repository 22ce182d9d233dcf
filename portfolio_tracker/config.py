"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import Wallet

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackerConfig:
    refresh_interval_minutes: int = 1
    display_currency: str = "USD"
    max_concurrency: int = 4
    storage_path: str = "~/.solana-portfolio/store.json"


@dataclass(frozen=True)
class RpcConfig:
    url: str = "https://mainnet.helius-rpc.com/"
    api_key: str = ""
    timeout: int = 10


@dataclass(frozen=True)
class TokenIndexConfig:
    base_url: str = "https://solana-gateway.moralis.io"
    api_key: str = ""
    timeout: int = 10


@dataclass(frozen=True)
class ProvidersConfig:
    rpc: RpcConfig = field(default_factory=RpcConfig)
    token_index: TokenIndexConfig = field(default_factory=TokenIndexConfig)


@dataclass(frozen=True)
class DexScreenerConfig:
    url: str = "https://api.dexscreener.com/latest/dex/tokens"
    timeout: int = 10
    batch_size: int = 30


@dataclass(frozen=True)
class JupiterConfig:
    url: str = "https://api.jup.ag/price/v2"
    timeout: int = 5


@dataclass(frozen=True)
class MoralisPriceConfig:
    timeout: int = 5


@dataclass(frozen=True)
class PricesConfig:
    dexscreener: DexScreenerConfig = field(default_factory=DexScreenerConfig)
    jupiter: JupiterConfig = field(default_factory=JupiterConfig)
    moralis: MoralisPriceConfig = field(default_factory=MoralisPriceConfig)


@dataclass(frozen=True)
class ExchangeRatesConfig:
    url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    timeout: int = 10


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    update_bot_token: str = ""
    report_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class EmailConfig:
    enabled: bool = False
    report_email: str = ""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    sender_email: str = ""
    sender_password: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    email: EmailConfig = field(default_factory=EmailConfig)


@dataclass(frozen=True)
class AppConfig:
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    wallets: tuple[Wallet, ...] = ()
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    prices: PricesConfig = field(default_factory=PricesConfig)
    exchange_rates: ExchangeRatesConfig = field(default_factory=ExchangeRatesConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")

# Base58 alphabet, 32..44 chars: the shape of a Solana public key.
_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def is_valid_address(address: str) -> bool:
    """Shape check only: base58 characters and a plausible length."""
    return bool(_ADDRESS_RE.match(address or ""))


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_tracker(raw: dict[str, Any]) -> TrackerConfig:
    return TrackerConfig(
        refresh_interval_minutes=int(raw.get("refresh_interval_minutes", 1)),
        display_currency=str(raw.get("display_currency", "USD")).upper(),
        max_concurrency=int(raw.get("max_concurrency", 4)),
        storage_path=raw.get("storage_path", TrackerConfig.storage_path),
    )


def _build_wallets(raw: list[dict[str, Any]]) -> tuple[Wallet, ...]:
    wallets: list[Wallet] = []
    for w in raw:
        address = str(w.get("address", "")).strip()
        wallets.append(
            Wallet(
                address=address,
                id=str(w.get("id", "")),
                display_name=w.get("display_name", ""),
                enabled=bool(w.get("enabled", True)),
            )
        )
    return tuple(wallets)


def _build_providers(raw: dict[str, Any]) -> ProvidersConfig:
    rpc = raw.get("rpc", {})
    idx = raw.get("token_index", {})
    return ProvidersConfig(
        rpc=RpcConfig(
            url=rpc.get("url", RpcConfig.url),
            api_key=rpc.get("api_key", ""),
            timeout=int(rpc.get("timeout", 10)),
        ),
        token_index=TokenIndexConfig(
            base_url=idx.get("base_url", TokenIndexConfig.base_url),
            api_key=idx.get("api_key", ""),
            timeout=int(idx.get("timeout", 10)),
        ),
    )


def _build_prices(raw: dict[str, Any]) -> PricesConfig:
    dex = raw.get("dexscreener", {})
    jup = raw.get("jupiter", {})
    mor = raw.get("moralis", {})
    return PricesConfig(
        dexscreener=DexScreenerConfig(
            url=dex.get("url", DexScreenerConfig.url),
            timeout=int(dex.get("timeout", 10)),
            batch_size=int(dex.get("batch_size", 30)),
        ),
        jupiter=JupiterConfig(
            url=jup.get("url", JupiterConfig.url),
            timeout=int(jup.get("timeout", 5)),
        ),
        moralis=MoralisPriceConfig(timeout=int(mor.get("timeout", 5))),
    )


def _build_exchange_rates(raw: dict[str, Any]) -> ExchangeRatesConfig:
    return ExchangeRatesConfig(
        url=raw.get("url", ExchangeRatesConfig.url),
        timeout=int(raw.get("timeout", 10)),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    em = raw.get("email", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            update_bot_token=tg.get("update_bot_token", ""),
            report_bot_token=tg.get("report_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
        email=EmailConfig(
            enabled=bool(em.get("enabled", False)),
            report_email=em.get("report_email", ""),
            smtp_server=em.get("smtp_server", "smtp.gmail.com"),
            smtp_port=int(em.get("smtp_port", 587)),
            sender_email=em.get("sender_email", ""),
            sender_password=em.get("sender_password", ""),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package directory).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        tracker=_build_tracker(raw.get("tracker", {})),
        wallets=_build_wallets(raw.get("wallets", [])),
        providers=_build_providers(raw.get("providers", {})),
        prices=_build_prices(raw.get("prices", {})),
        exchange_rates=_build_exchange_rates(raw.get("exchange_rates", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration.

    Credentials are checked at aggregation time, not here, so wallet
    management keeps working without them.
    """
    if not _CURRENCY_RE.match(cfg.tracker.display_currency):
        raise ValueError(
            f"Invalid display currency '{cfg.tracker.display_currency}'"
        )
    if cfg.tracker.max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")
    if cfg.tracker.refresh_interval_minutes < 1:
        raise ValueError("refresh_interval_minutes must be at least 1")
    if cfg.prices.dexscreener.batch_size < 1:
        raise ValueError("dexscreener batch_size must be at least 1")

    seen_ids: set[str] = set()
    for wallet in cfg.wallets:
        label = wallet.display_name or wallet.id or wallet.address
        if not wallet.address:
            raise ValueError(f"Wallet '{label}' has no address")
        if not is_valid_address(wallet.address):
            raise ValueError(
                f"Wallet '{label}' has malformed address '{wallet.address}'"
            )
        if wallet.id:
            if wallet.id in seen_ids:
                raise ValueError(f"Duplicate wallet id '{wallet.id}'")
            seen_ids.add(wallet.id)
