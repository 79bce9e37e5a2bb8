"""Minimal ABI encoding/decoding for argument-less view calls."""
from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from ...errors import RpcError


def encode_call(signature: str) -> str:
    """Calldata for a call without arguments, e.g. ``"totalSupply()"``."""
    return encode_hex(function_signature_to_4byte_selector(signature))


def decode_result(types: Sequence[str], data: str) -> tuple[Any, ...]:
    """Decode ``eth_call`` return data.

    Empty return data means the target has no code or no such function.
    """
    raw = decode_hex(data)
    if not raw:
        raise RpcError(f"Empty return data, cannot decode {list(types)}")
    return tuple(decode(list(types), raw))
