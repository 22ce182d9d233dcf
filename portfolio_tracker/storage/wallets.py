"""Wallet registry: user-managed wallets kept in the key/value store."""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from ..config import is_valid_address
from ..interfaces.store import KeyValueStore
from ..models import Wallet

logger = logging.getLogger(__name__)

WALLETS_KEY = "wallets"


class WalletRegistry:
    """Add, rename, toggle and delete wallets by address."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def list_wallets(self) -> list[Wallet]:
        return [Wallet.from_dict(raw) for raw in self._store.get(WALLETS_KEY, [])]

    def _save(self, wallets: list[Wallet]) -> None:
        self._store.set(WALLETS_KEY, [w.to_dict() for w in wallets])

    def get(self, address: str) -> Wallet | None:
        for wallet in self.list_wallets():
            if wallet.address == address:
                return wallet
        return None

    def add(self, address: str, display_name: str = "") -> Wallet:
        address = address.strip()
        if not is_valid_address(address):
            raise ValueError(f"Malformed wallet address '{address}'")

        wallets = self.list_wallets()
        if any(w.address == address for w in wallets):
            raise ValueError(f"Wallet {address} is already tracked")

        wallet = Wallet(
            address=address,
            id=uuid.uuid4().hex[:12],
            display_name=display_name or f"Wallet {len(wallets) + 1}",
            enabled=True,
        )
        self._save(wallets + [wallet])
        logger.info("Added wallet %s (%s)", wallet.display_name, address)
        return wallet

    def _update(self, address: str, **changes: object) -> Wallet:
        wallets = self.list_wallets()
        for i, wallet in enumerate(wallets):
            if wallet.address == address:
                wallets[i] = replace(wallet, **changes)
                self._save(wallets)
                return wallets[i]
        raise KeyError(address)

    def rename(self, address: str, display_name: str) -> Wallet:
        return self._update(address, display_name=display_name)

    def set_enabled(self, address: str, enabled: bool) -> Wallet:
        return self._update(address, enabled=enabled)

    def remove(self, address: str) -> bool:
        wallets = self.list_wallets()
        kept = [w for w in wallets if w.address != address]
        if len(kept) == len(wallets):
            return False
        self._save(kept)
        logger.info("Removed wallet %s", address)
        return True
