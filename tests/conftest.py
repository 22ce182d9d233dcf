"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio_tracker.config import (
    AppConfig,
    EmailConfig,
    NotificationsConfig,
    ProvidersConfig,
    RpcConfig,
    TelegramConfig,
    TokenIndexConfig,
    TrackerConfig,
)
from portfolio_tracker.models import (
    NATIVE_ASSET_ID,
    Holding,
    PortfolioSnapshot,
    PriceQuote,
    TokenBalance,
    Wallet,
)
from portfolio_tracker.storage import MemoryStore

WALLET_A = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
WALLET_B = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
TOKEN_T = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
HELIUS_KEY = "123e4567-e89b-12d3-a456-426614174000"
MORALIS_KEY = "eyJhbGciOi.eyJub25jZSI6.c2lnbmF0dXJl"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def wallet_a() -> Wallet:
    return Wallet(address=WALLET_A, id="a", display_name="Wallet A")


@pytest.fixture()
def wallet_b() -> Wallet:
    return Wallet(address=WALLET_B, id="b", display_name="Wallet B")


@pytest.fixture()
def sample_app_config(tmp_path: Path, wallet_a: Wallet) -> AppConfig:
    return AppConfig(
        tracker=TrackerConfig(
            refresh_interval_minutes=5,
            display_currency="USD",
            max_concurrency=2,
            storage_path=str(tmp_path / "store.json"),
        ),
        wallets=(wallet_a,),
        providers=ProvidersConfig(
            rpc=RpcConfig(api_key=HELIUS_KEY, timeout=5),
            token_index=TokenIndexConfig(api_key=MORALIS_KEY, timeout=5),
        ),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                update_bot_token="fake-update-token",
                report_bot_token="fake-report-token",
                chat_id="12345",
            ),
            email=EmailConfig(enabled=False),
        ),
    )


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_snapshot() -> PortfolioSnapshot:
    return PortfolioSnapshot(
        total_value_usd=325.0,
        holdings=(
            Holding(
                asset_id=NATIVE_ASSET_ID,
                symbol="SOL",
                display_name="Solana",
                quantity=3.0,
                unit_price_usd=100.0,
                value_usd=300.0,
                decimals=9,
            ),
            Holding(
                asset_id=TOKEN_T,
                symbol="TTT",
                display_name="Test Token",
                quantity=50.0,
                unit_price_usd=0.5,
                value_usd=25.0,
                decimals=6,
            ),
        ),
        captured_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def sample_prices() -> dict[str, PriceQuote]:
    return {
        NATIVE_ASSET_ID: PriceQuote(
            asset_id=NATIVE_ASSET_ID, price_usd=100.0, liquidity_usd=1e7,
            symbol="SOL", display_name="Wrapped SOL", source="dexscreener",
        ),
        TOKEN_T: PriceQuote(
            asset_id=TOKEN_T, price_usd=0.5, liquidity_usd=1e4,
            symbol="TTT", display_name="Test Token", source="dexscreener",
        ),
    }


# ---------------------------------------------------------------------------
# Provider doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def native_source() -> MagicMock:
    """SOL balances: A holds 2.0, B holds 1.0."""
    source = MagicMock()
    balances = {WALLET_A: 2.0, WALLET_B: 1.0}
    source.get_balance = AsyncMock(side_effect=lambda addr: balances.get(addr, 0.0))
    return source


@pytest.fixture()
def token_source() -> MagicMock:
    """Token balances: A holds nothing, B holds 50 TTT."""
    source = MagicMock()
    tokens = {
        WALLET_A: [],
        WALLET_B: [
            TokenBalance(
                asset_id=TOKEN_T, quantity=50.0, symbol="TTT",
                display_name="Test Token", decimals=6,
            )
        ],
    }
    source.get_token_balances = AsyncMock(side_effect=lambda addr: list(tokens.get(addr, [])))
    return source


def make_stage(name: str, quotes: dict[str, PriceQuote] | None = None, error: Exception | None = None) -> MagicMock:
    """A price stage that answers only for the ids it was asked about."""
    stage = MagicMock()
    stage.name = name
    known = quotes or {}

    async def fetch_quotes(asset_ids: list[str]) -> dict[str, PriceQuote]:
        if error is not None:
            raise error
        return {a: known[a] for a in asset_ids if a in known}

    stage.fetch_quotes = AsyncMock(side_effect=fetch_quotes)
    return stage


@pytest.fixture()
def stage_factory() -> Callable[..., MagicMock]:
    return make_stage


# ---------------------------------------------------------------------------
# HTTP doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_session() -> Callable[..., AsyncMock]:
    """Build a mock aiohttp session whose ``request`` returns given data."""

    def _make(
        data: Any = None, status: int = 200, error: Exception | None = None
    ) -> AsyncMock:
        mock_response = AsyncMock()
        mock_response.status = status
        mock_response.json = AsyncMock(return_value=data)
        mock_response.__aenter__ = AsyncMock(return_value=mock_response)
        mock_response.__aexit__ = AsyncMock(return_value=None)

        mock_session = AsyncMock()
        if error:
            mock_session.request = MagicMock(side_effect=error)
        else:
            mock_session.request = MagicMock(return_value=mock_response)
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)
        return mock_session

    return _make


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Mutable ``today`` callable for the rate cache."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(date(2024, 5, 1))


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    tracker:
      refresh_interval_minutes: 5
      display_currency: eur
      max_concurrency: 2
    wallets:
      - id: main
        display_name: Main
        address: "{WALLET_A}"
      - id: cold
        display_name: Cold
        address: "{WALLET_B}"
        enabled: false
    providers:
      rpc:
        api_key: "{HELIUS_KEY}"
        timeout: 7
      token_index:
        api_key: "{MORALIS_KEY}"
    prices:
      dexscreener:
        batch_size: 10
      jupiter:
        timeout: 3
    exchange_rates:
      url: "https://rates.example.com/latest/USD"
    notifications:
      telegram:
        enabled: true
        update_bot_token: "tok1"
        report_bot_token: "tok2"
        chat_id: 999
      email:
        enabled: false
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
