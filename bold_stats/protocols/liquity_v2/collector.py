"""Raw snapshot collection. All reads of one call target the same block."""
from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Sequence

from ...chains.evm.abi import decode_result, encode_call
from ...chains.evm.client import block_param
from ...decimals import EXACT, ONE_WEI, from_wei
from ...interfaces.chain import BlockParam, ChainClient
from ...models import BranchContracts, Deployment, RawBranchFields, SnapshotReference


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Await all, failing on the first error.

    The first exception propagates unchanged and every task still
    running is cancelled, so no partial result is observable.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def _read(
    client: ChainClient,
    to: str,
    signature: str,
    types: Sequence[str],
    block: BlockParam,
) -> tuple[Any, ...]:
    data = await client.call(to, encode_call(signature), block)
    return decode_result(types, data)


async def _read_uint(
    client: ChainClient, to: str, signature: str, block: BlockParam
) -> Decimal:
    (value,) = await _read(client, to, signature, ["uint256"], block)
    return from_wei(value)


async def _read_symbol(client: ChainClient, to: str, block: BlockParam) -> str:
    (symbol,) = await _read(client, to, "symbol()", ["string"], block)
    return symbol


async def _read_price(client: ChainClient, to: str, block: BlockParam) -> Decimal:
    # fetchPrice() is non-view and returns (price, newOracleFailureDetected)
    price, _ = await _read(client, to, "fetchPrice()", ["uint256", "bool"], block)
    return from_wei(price)


async def _read_interest_accrual_1y(
    client: ChainClient, active_pool: str, block: BlockParam
) -> Decimal:
    # aggWeightedDebtSum is debt * annual rate, both 18-decimal
    weighted = await _read_uint(client, active_pool, "aggWeightedDebtSum()", block)
    return EXACT.multiply(weighted, ONE_WEI)


async def collect_branch(
    client: ChainClient, branch: BranchContracts, block: BlockParam
) -> RawBranchFields:
    """Read every raw field of one branch concurrently."""
    pool = branch.active_pool
    (
        coll_symbol,
        coll_active,
        coll_default,
        coll_price,
        sp_deposits,
        interest_accrual_1y,
        interest_pending,
        batch_management_fees,
        batch_management_fee_pending,
    ) = await gather_or_cancel(
        _read_symbol(client, branch.coll_token, block),
        _read_uint(client, pool, "getCollBalance()", block),
        _read_uint(client, branch.default_pool, "getCollBalance()", block),
        _read_price(client, branch.price_feed, block),
        _read_uint(client, branch.stability_pool, "getTotalBoldDeposits()", block),
        _read_interest_accrual_1y(client, pool, block),
        _read_uint(client, pool, "calcPendingAggInterest()", block),
        _read_uint(client, pool, "aggBatchManagementFees()", block),
        _read_uint(client, pool, "calcPendingAggBatchManagementFee()", block),
    )

    return RawBranchFields(
        coll_symbol=coll_symbol,
        coll_active=coll_active,
        coll_default=coll_default,
        coll_price=coll_price,
        sp_deposits=sp_deposits,
        interest_accrual_1y=interest_accrual_1y,
        interest_pending=interest_pending,
        batch_management_fees=batch_management_fees,
        batch_management_fee_pending=batch_management_fee_pending,
    )


async def collect_snapshot(
    client: ChainClient,
    deployment: Deployment,
    reference: SnapshotReference = "latest",
) -> tuple[Decimal, tuple[RawBranchFields, ...]]:
    """Read total BOLD supply and every branch's raw fields at one block.

    Fails as a whole if any single read fails.

    Returns:
        ``(total_bold_supply, raw_branches)`` with branches in deployment order.
    """
    block = block_param(reference)
    total_supply, *branches = await gather_or_cancel(
        _read_uint(client, deployment.bold_token, "totalSupply()", block),
        *(collect_branch(client, b, block) for b in deployment.branches),
    )
    return total_supply, tuple(branches)
