"""Price oracles, in fallback order."""
from .dexscreener import DexScreenerOracle
from .jupiter import JupiterOracle
from .moralis import MoralisOracle

__all__ = ["DexScreenerOracle", "JupiterOracle", "MoralisOracle"]
