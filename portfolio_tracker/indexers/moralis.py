"""Moralis Solana gateway client: SPL token balances and token prices."""
from __future__ import annotations

import logging
from typing import Any

from .. import http
from ..config import TokenIndexConfig
from ..errors import ConfigurationError, ProviderUnavailable
from ..models import TokenBalance

logger = logging.getLogger(__name__)

PROVIDER = "moralis"


def validate_api_key(api_key: str) -> bool:
    """Moralis keys are JWTs: three non-empty dot-separated parts."""
    if not api_key:
        return False
    parts = api_key.split(".")
    return len(parts) == 3 and all(parts)


def _parse_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class MoralisClient:
    """Token-index provider. Also serves single-token USD prices."""

    def __init__(self, config: TokenIndexConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.api_key = config.api_key
        self.timeout = config.timeout

    @property
    def has_valid_credentials(self) -> bool:
        return validate_api_key(self.api_key)

    def ensure_credentials(self) -> None:
        """Raise ConfigurationError unless a well-formed API key is set."""
        if not self.api_key:
            raise ConfigurationError(
                "Moralis API key not configured (providers.token_index.api_key)"
            )
        if not validate_api_key(self.api_key):
            raise ConfigurationError("Invalid Moralis API key format")

    def _headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key, "accept": "application/json"}

    async def _get(
        self, path: str, params: dict[str, Any], timeout: float | None = None
    ) -> Any:
        self.ensure_credentials()
        try:
            return await http.get_json(
                PROVIDER,
                f"{self.base_url}{path}",
                timeout=timeout or self.timeout,
                params=params,
                headers=self._headers(),
            )
        except http.HttpStatusError as e:
            if e.status == 401:
                raise ConfigurationError("Invalid Moralis API key") from e
            raise

    async def get_token_balances(self, wallet_address: str) -> list[TokenBalance]:
        """List the wallet's SPL token balances.

        Entries with a non-positive or unparsable amount are dropped.
        """
        data = await self._get(
            f"/account/mainnet/{wallet_address}/tokens",
            {"network": "mainnet", "excludeSpam": "false"},
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise ProviderUnavailable(PROVIDER, "token list is not an array")

        balances: list[TokenBalance] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            mint = entry.get("mint")
            try:
                amount = float(entry.get("amount") or 0)
            except (TypeError, ValueError):
                logger.debug("Unparsable amount for %s: %r", mint, entry.get("amount"))
                continue
            if not mint or amount <= 0:
                continue

            balances.append(
                TokenBalance(
                    asset_id=mint,
                    quantity=amount,
                    symbol=entry.get("symbol") or None,
                    display_name=entry.get("name") or None,
                    decimals=_parse_int(entry.get("decimals")),
                )
            )

        logger.info(
            "Found %d SPL tokens for %s (%d reported)",
            len(balances), wallet_address, len(data),
        )
        return balances

    async def get_token_price(
        self, mint: str, timeout: float | None = None
    ) -> dict[str, Any]:
        """Return the raw price record for one mint."""
        data = await self._get(
            f"/token/mainnet/{mint}/price", {"network": "mainnet"}, timeout
        )
        if not isinstance(data, dict):
            raise ProviderUnavailable(PROVIDER, "price record is not an object")
        return data
