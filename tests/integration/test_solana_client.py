"""Integration tests for the Solana RPC client with mocked HTTP."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from portfolio_tracker.chains.solana import SolanaClient
from portfolio_tracker.config import RpcConfig
from portfolio_tracker.errors import ConfigurationError, ProviderUnavailable

from conftest import HELIUS_KEY, WALLET_A


@pytest.fixture()
def client() -> SolanaClient:
    return SolanaClient(RpcConfig(url="https://rpc.test/", api_key=HELIUS_KEY, timeout=5))


class TestCredentials:
    def test_missing_key(self) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            SolanaClient(RpcConfig()).ensure_credentials()

    def test_malformed_key(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid Helius API key format"):
            SolanaClient(RpcConfig(api_key="not-a-uuid")).ensure_credentials()

    @pytest.mark.asyncio
    async def test_no_request_without_key(self, make_session) -> None:
        session = make_session({"result": {"value": 1}})
        with patch("portfolio_tracker.http.aiohttp.ClientSession", return_value=session):
            with patch("portfolio_tracker.http.aiohttp.TCPConnector"):
                with pytest.raises(ConfigurationError):
                    await SolanaClient(RpcConfig()).get_balance(WALLET_A)
        session.request.assert_not_called()


class TestGetBalance:
    @pytest.mark.asyncio
    async def test_lamports_to_sol(self, client: SolanaClient, make_session) -> None:
        session = make_session({"jsonrpc": "2.0", "id": 1, "result": {"value": 2_500_000_000}})
        with patch("portfolio_tracker.http.aiohttp.ClientSession", return_value=session):
            with patch("portfolio_tracker.http.aiohttp.TCPConnector"):
                balance = await client.get_balance(WALLET_A)

        assert balance == 2.5
        kwargs = session.request.call_args.kwargs
        assert kwargs["params"] == {"api-key": HELIUS_KEY}
        assert kwargs["json"]["method"] == "getBalance"
        assert kwargs["json"]["params"] == [WALLET_A]

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self, client: SolanaClient, make_session) -> None:
        session = make_session({"jsonrpc": "2.0", "error": {"code": -32602, "message": "bad"}})
        with patch("portfolio_tracker.http.aiohttp.ClientSession", return_value=session):
            with patch("portfolio_tracker.http.aiohttp.TCPConnector"):
                with pytest.raises(ProviderUnavailable, match="RPC Error: bad"):
                    await client.get_balance(WALLET_A)

    @pytest.mark.asyncio
    async def test_http_failure_raises(self, client: SolanaClient, make_session) -> None:
        with patch(
            "portfolio_tracker.http.aiohttp.ClientSession",
            return_value=make_session(None, status=503),
        ):
            with patch("portfolio_tracker.http.aiohttp.TCPConnector"):
                with pytest.raises(ProviderUnavailable):
                    await client.get_balance(WALLET_A)
