"""Solana JSON-RPC client (Helius)."""
from __future__ import annotations

import logging
import re
from typing import Any

from ... import http
from ...config import RpcConfig
from ...errors import ConfigurationError, ProviderUnavailable
from ...models import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)

PROVIDER = "helius-rpc"

# Helius API keys are UUIDs.
_API_KEY_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def validate_api_key(api_key: str) -> bool:
    return bool(api_key) and bool(_API_KEY_RE.match(api_key))


class SolanaClient:
    """Read native SOL balances over JSON-RPC."""

    def __init__(self, config: RpcConfig) -> None:
        self.url = config.url
        self.api_key = config.api_key
        self.timeout = config.timeout

    def ensure_credentials(self) -> None:
        """Raise ConfigurationError unless a well-formed API key is set."""
        if not self.api_key:
            raise ConfigurationError(
                "Helius API key not configured (providers.rpc.api_key)"
            )
        if not validate_api_key(self.api_key):
            raise ConfigurationError("Invalid Helius API key format")

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a JSON-RPC call and return its ``result`` member."""
        self.ensure_credentials()
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        result = await http.post_json(
            PROVIDER,
            self.url,
            timeout=self.timeout,
            params={"api-key": self.api_key},
            json=payload,
        )
        if not isinstance(result, dict):
            raise ProviderUnavailable(PROVIDER, "malformed JSON-RPC response")
        if "error" in result:
            error = result["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ProviderUnavailable(PROVIDER, f"RPC Error: {message}")

        return result.get("result")

    async def get_balance(self, wallet_address: str) -> float:
        """Return the wallet's SOL balance (lamports / 1e9)."""
        result = await self.rpc_call("getBalance", [wallet_address])
        lamports = (result or {}).get("value", 0) if isinstance(result, dict) else 0
        balance = int(lamports or 0) / LAMPORTS_PER_SOL
        logger.debug("SOL balance for %s: %.9f", wallet_address, balance)
        return balance
