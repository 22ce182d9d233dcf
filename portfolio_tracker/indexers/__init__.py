"""Token index clients."""
from .moralis import MoralisClient

__all__ = ["MoralisClient"]
