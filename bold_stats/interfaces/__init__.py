"""Protocol interfaces for bold-stats."""
from .chain import BlockParam, ChainClient

__all__ = ["BlockParam", "ChainClient"]
