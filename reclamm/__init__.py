"""reClAMM - readjusting concentrated liquidity AMM math in Python."""

from reclamm.pool import ReClammAMM, ReClammPool

__version__ = "0.1.0"
__all__ = ["ReClammAMM", "ReClammPool", "__version__"]
