"""Shared test fixtures and sample data."""
from __future__ import annotations

import json
import textwrap
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from eth_abi import encode
from eth_utils import encode_hex, function_signature_to_4byte_selector

from bold_stats.config import AppConfig, ChainConfig, StatsConfig
from bold_stats.errors import RpcError
from bold_stats.models import BranchContracts, Deployment, RawBranchFields

WEI = 10**18


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_deployment_manifest() -> dict[str, Any]:
    return {
        "boldToken": "0x1111111111111111111111111111111111111111",
        "constants": {"SP_YIELD_SPLIT": "750000000000000000"},
        "branches": [
            {
                "collSymbol": "WETH",
                "collToken": "0x2000000000000000000000000000000000000001",
                "activePool": "0x2000000000000000000000000000000000000002",
                "defaultPool": "0x2000000000000000000000000000000000000003",
                "priceFeed": "0x2000000000000000000000000000000000000004",
                "stabilityPool": "0x2000000000000000000000000000000000000005",
            },
            {
                "collSymbol": "rETH",
                "collToken": "0x3000000000000000000000000000000000000001",
                "activePool": "0x3000000000000000000000000000000000000002",
                "defaultPool": "0x3000000000000000000000000000000000000003",
                "priceFeed": "0x3000000000000000000000000000000000000004",
                "stabilityPool": "0x3000000000000000000000000000000000000005",
            },
        ],
    }


@pytest.fixture()
def sample_deployment_path(
    tmp_path: Path, sample_deployment_manifest: dict[str, Any]
) -> Path:
    path = tmp_path / "deployment.json"
    path.write_text(json.dumps(sample_deployment_manifest))
    return path


@pytest.fixture()
def sample_deployment() -> Deployment:
    return Deployment(
        bold_token="0x1111111111111111111111111111111111111111",
        sp_yield_split=Decimal("0.75"),
        branches=(
            BranchContracts(
                coll_symbol="WETH",
                coll_token="0x2000000000000000000000000000000000000001",
                active_pool="0x2000000000000000000000000000000000000002",
                default_pool="0x2000000000000000000000000000000000000003",
                price_feed="0x2000000000000000000000000000000000000004",
                stability_pool="0x2000000000000000000000000000000000000005",
            ),
            BranchContracts(
                coll_symbol="rETH",
                coll_token="0x3000000000000000000000000000000000000001",
                active_pool="0x3000000000000000000000000000000000000002",
                default_pool="0x3000000000000000000000000000000000000003",
                price_feed="0x3000000000000000000000000000000000000004",
                stability_pool="0x3000000000000000000000000000000000000005",
            ),
        ),
    )


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig, sample_deployment_path: Path
) -> AppConfig:
    return AppConfig(
        chain=sample_chain_config,
        deployment_path=sample_deployment_path,
        stats=StatsConfig(block="latest", pin_latest=True),
    )


SAMPLE_YAML = textwrap.dedent("""\
    chain:
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 10
    deployment: deployment.json
    stats:
      block: latest
      pin_latest: false
      output: out/stats.json
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


def make_raw_branch(**overrides: Any) -> RawBranchFields:
    fields: dict[str, Any] = {
        "coll_symbol": "WETH",
        "coll_active": Decimal("100"),
        "coll_default": Decimal("0"),
        "coll_price": Decimal("2000"),
        "sp_deposits": Decimal("0"),
        "interest_accrual_1y": Decimal("0"),
        "interest_pending": Decimal("0"),
        "batch_management_fees": Decimal("0"),
        "batch_management_fee_pending": Decimal("0"),
    }
    fields.update(overrides)
    return RawBranchFields(**fields)


@pytest.fixture()
def make_raw():
    return make_raw_branch


@pytest.fixture()
def sample_raw_branch() -> RawBranchFields:
    return make_raw_branch(
        coll_active=Decimal("1500.25"),
        coll_default=Decimal("12.5"),
        coll_price=Decimal("3012.345678901234567891"),
        sp_deposits=Decimal("2000000"),
        interest_accrual_1y=Decimal("133333.333333333333333333"),
        interest_pending=Decimal("12.000000000000000001"),
        batch_management_fees=Decimal("3.5"),
        batch_management_fee_pending=Decimal("0.25"),
    )


# ---------------------------------------------------------------------------
# Fake chain
# ---------------------------------------------------------------------------


def selector(signature: str) -> str:
    return encode_hex(function_signature_to_4byte_selector(signature))


def abi_uint(value: int) -> str:
    return encode_hex(encode(["uint256"], [value]))


def abi_string(value: str) -> str:
    return encode_hex(encode(["string"], [value]))


def abi_price(value: int) -> str:
    return encode_hex(encode(["uint256", "bool"], [value, False]))


class FakeChain:
    """In-memory ChainClient answering eth_call by (address, selector)."""

    def __init__(self, responses: dict[tuple[str, str], str]) -> None:
        self.responses = {(to.lower(), sel): v for (to, sel), v in responses.items()}
        self.calls: list[tuple[str, str, Any]] = []
        self.failing: set[tuple[str, str]] = set()
        self.head = 19_000_000

    def fail(self, to: str, signature: str) -> None:
        self.failing.add((to.lower(), selector(signature)))

    async def call(self, to: str, data: str, block: Any) -> str:
        key = (to.lower(), data)
        self.calls.append((to, data, block))
        if key in self.failing:
            raise RpcError(f"execution reverted: {to} {data}")
        return self.responses[key]

    async def block_number(self) -> int:
        return self.head


def branch_responses(
    branch: BranchContracts,
    symbol: str,
    coll_active: int,
    coll_default: int,
    price: int,
    sp_deposits: int,
    weighted_debt_sum: int = 0,
    interest_pending: int = 0,
    batch_fees: int = 0,
    batch_fee_pending: int = 0,
) -> dict[tuple[str, str], str]:
    pool = branch.active_pool
    return {
        (branch.coll_token, selector("symbol()")): abi_string(symbol),
        (pool, selector("getCollBalance()")): abi_uint(coll_active),
        (branch.default_pool, selector("getCollBalance()")): abi_uint(coll_default),
        (branch.price_feed, selector("fetchPrice()")): abi_price(price),
        (branch.stability_pool, selector("getTotalBoldDeposits()")): abi_uint(sp_deposits),
        (pool, selector("aggWeightedDebtSum()")): abi_uint(weighted_debt_sum),
        (pool, selector("calcPendingAggInterest()")): abi_uint(interest_pending),
        (pool, selector("aggBatchManagementFees()")): abi_uint(batch_fees),
        (pool, selector("calcPendingAggBatchManagementFee()")): abi_uint(batch_fee_pending),
    }


@pytest.fixture()
def fake_chain(sample_deployment: Deployment) -> FakeChain:
    weth, reth = sample_deployment.branches
    responses = {
        (sample_deployment.bold_token, selector("totalSupply()")): abi_uint(
            50_000_000 * WEI
        ),
    }
    # WETH: 100 + 1 ETH @ 2000, 20M BOLD in SP, 40M debt at 5%
    responses.update(
        branch_responses(
            weth,
            "WETH",
            coll_active=100 * WEI,
            coll_default=1 * WEI,
            price=2000 * WEI,
            sp_deposits=20_000_000 * WEI,
            weighted_debt_sum=2_000_000 * WEI * WEI,
            interest_pending=5 * WEI,
            batch_fees=2 * WEI,
            batch_fee_pending=WEI // 2,
        )
    )
    # rETH: empty stability pool
    responses.update(
        branch_responses(
            reth,
            "rETH",
            coll_active=10 * WEI,
            coll_default=0,
            price=2200 * WEI,
            sp_deposits=0,
            weighted_debt_sum=100 * WEI * WEI,
            interest_pending=WEI,
        )
    )
    return FakeChain(responses)
