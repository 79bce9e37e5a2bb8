"""EVM JSON-RPC client and ABI helpers."""
from .client import EvmClient, block_param

__all__ = ["EvmClient", "block_param"]
