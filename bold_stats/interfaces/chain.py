"""Chain client protocol — EVM read-only RPC abstraction."""
from typing import Any, Protocol, Union

# JSON-RPC block parameter: hex quantity, tag, or EIP-1898 object.
BlockParam = Union[str, dict[str, Any]]


class ChainClient(Protocol):
    """Abstract interface for read-at-block contract calls."""

    async def call(self, to: str, data: str, block: BlockParam) -> str: ...

    async def block_number(self) -> int: ...
