"""EVM JSON-RPC client with endpoint fallback."""
from __future__ import annotations

import asyncio
import logging
import re
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import RpcError
from ...interfaces.chain import BlockParam
from ...models import SnapshotReference

logger = logging.getLogger(__name__)

BLOCK_TAGS = frozenset({"latest", "safe", "finalized", "earliest", "pending"})

_BLOCK_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_BLOCK_NUMBER_HEX_RE = re.compile(r"^0x[0-9a-fA-F]{1,63}$")


def block_param(reference: SnapshotReference) -> BlockParam:
    """Translate a snapshot reference into a JSON-RPC block parameter.

    Examples:
        19000000 → "0x121eac0"
        "19000000" → "0x121eac0"
        "0x0121EAC0" → "0x121eac0"
        "latest" → "latest"
        "0x<64 hex>" → {"blockHash": "0x<64 hex>", "requireCanonical": True}
    """
    if isinstance(reference, bool):
        raise ValueError(f"Invalid block reference: {reference!r}")
    if isinstance(reference, int):
        if reference < 0:
            raise ValueError(f"Block number must be non-negative, got {reference}")
        return hex(reference)

    text = reference.strip()
    if text.lower() in BLOCK_TAGS:
        return text.lower()
    if text.isdigit():
        return hex(int(text))
    if _BLOCK_NUMBER_HEX_RE.match(text):
        return hex(int(text, 16))
    if _BLOCK_HASH_RE.match(text):
        return {"blockHash": text, "requireCanonical": True}
    raise ValueError(f"Invalid block reference: {reference!r}")


class EvmClient:
    """EVM RPC client with automatic endpoint fallback.

    Transport failures move on to the next endpoint. A JSON-RPC error
    response (reverted call, unknown block) is raised immediately.
    """

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
            except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError) as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if not isinstance(result, dict):
                raise RpcError(f"Unexpected RPC response to {method}: {result!r}")
            if "error" in result:
                raise RpcError(f"RPC Error from {method}: {result['error']}")

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index

            return result.get("result")

        raise RpcError(f"All RPC endpoints failed. Last error: {last_error}")

    async def call(self, to: str, data: str, block: BlockParam) -> str:
        """``eth_call`` against ``to`` at ``block``; returns hex return data."""
        result = await self.rpc_call("eth_call", [{"to": to, "data": data}, block])
        if not isinstance(result, str):
            raise RpcError(f"Unexpected eth_call result: {result!r}")
        return result

    async def block_number(self) -> int:
        """Current head block number."""
        result = await self.rpc_call("eth_blockNumber", [])
        if not isinstance(result, str):
            raise RpcError(f"Unexpected eth_blockNumber result: {result!r}")
        return int(result, 16)
