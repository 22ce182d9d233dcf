"""Local persistence."""
from .json_store import JsonFileStore, MemoryStore
from .wallets import WalletRegistry

__all__ = ["JsonFileStore", "MemoryStore", "WalletRegistry"]
