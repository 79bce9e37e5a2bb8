"""Deployment manifest loader."""
from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from eth_utils import is_address, to_checksum_address

from ...decimals import parse_wei_string
from ...models import BranchContracts, Deployment

logger = logging.getLogger(__name__)

_BRANCH_FIELDS = {
    "coll_token": "collToken",
    "active_pool": "activePool",
    "default_pool": "defaultPool",
    "price_feed": "priceFeed",
    "stability_pool": "stabilityPool",
}


def _address(value: Any, what: str) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address for {what}: {value!r}")
    return to_checksum_address(value)


def _parse_split(constants: dict[str, Any]) -> Decimal:
    raw = constants.get("SP_YIELD_SPLIT")
    if raw is None:
        raise ValueError("Deployment constants have no SP_YIELD_SPLIT")
    split = parse_wei_string(str(raw))
    if split > 1:
        raise ValueError(f"SP_YIELD_SPLIT must not exceed 1, got {split}")
    return split


def _parse_branch(index: int, raw: dict[str, Any]) -> BranchContracts:
    addresses = {
        attr: _address(raw.get(key), f"branch {index} {key}")
        for attr, key in _BRANCH_FIELDS.items()
    }
    return BranchContracts(coll_symbol=raw.get("collSymbol", ""), **addresses)


def parse_deployment(raw: dict[str, Any]) -> Deployment:
    """Build a Deployment from a parsed manifest.

    Expected shape::

        {
          "boldToken": "0x...",
          "constants": {"SP_YIELD_SPLIT": "750000000000000000", ...},
          "branches": [
            {"collToken": "0x...", "activePool": "0x...", "defaultPool": "0x...",
             "priceFeed": "0x...", "stabilityPool": "0x...", ...},
          ]
        }
    """
    branches_raw = raw.get("branches") or []
    if not branches_raw:
        raise ValueError("Deployment has no branches")

    return Deployment(
        bold_token=_address(raw.get("boldToken"), "boldToken"),
        sp_yield_split=_parse_split(raw.get("constants") or {}),
        branches=tuple(_parse_branch(i, b) for i, b in enumerate(branches_raw)),
    )


def load_deployment(path: str | Path) -> Deployment:
    """Load a deployment manifest (JSON or YAML) from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Deployment file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    deployment = parse_deployment(raw)
    logger.info(
        "Loaded deployment from %s (%d branches)", path, len(deployment.branches)
    )
    return deployment
