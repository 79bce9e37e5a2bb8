"""Pure derivation of branch and protocol metrics — no I/O."""
from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Iterable

from .decimals import EXACT, ZERO
from .errors import EmptyBranchSetError
from .models import BranchMetrics, ProtocolSummary, RawBranchFields


def calc_sp_apy(
    split: Decimal, interest_accrual_1y: Decimal, sp_deposits: Decimal
) -> float | None:
    """Annualized stability-pool yield, in float arithmetic.

    sp_apy = split * interest_accrual_1y / sp_deposits

    Returns None when there are no deposits to rate.
    """
    if sp_deposits == ZERO:
        return None
    return float(split) * float(interest_accrual_1y) / float(sp_deposits)


def derive_branch_metrics(raw: RawBranchFields, split: Decimal) -> BranchMetrics:
    """Derive pending debt, collateral value, SP yield and value locked for one branch."""
    with localcontext(EXACT):
        fees_pending = raw.batch_management_fees + raw.batch_management_fee_pending
        debt_pending = raw.interest_pending + fees_pending
        coll_value = (raw.coll_active + raw.coll_default) * raw.coll_price
        # BOLD taken at face value
        value_locked = coll_value + raw.sp_deposits

    return BranchMetrics(
        raw=raw,
        batch_management_fees_pending=fees_pending,
        debt_pending=debt_pending,
        coll_value=coll_value,
        value_locked=value_locked,
        sp_apy=calc_sp_apy(split, raw.interest_accrual_1y, raw.sp_deposits),
    )


def _exact_sum(values: Iterable[Decimal]) -> Decimal:
    total = ZERO
    with localcontext(EXACT):
        for value in values:
            total += value
    return total


def max_defined_apy(apys: Iterable[float | None]) -> float | None:
    """Maximum of the defined rates, or None if none is defined."""
    return max((apy for apy in apys if apy is not None), default=None)


def reduce_protocol(
    total_bold_supply: Decimal, branches: Iterable[BranchMetrics]
) -> ProtocolSummary:
    """Fold per-branch metrics into protocol-wide totals.

    Raises:
        EmptyBranchSetError: if ``branches`` is empty.
    """
    branches = tuple(branches)
    if not branches:
        raise EmptyBranchSetError("Cannot reduce protocol totals over zero branches")

    return ProtocolSummary(
        total_bold_supply=total_bold_supply,
        total_debt_pending=_exact_sum(b.debt_pending for b in branches),
        total_coll_value=_exact_sum(b.coll_value for b in branches),
        total_sp_deposits=_exact_sum(b.sp_deposits for b in branches),
        total_value_locked=_exact_sum(b.value_locked for b in branches),
        max_sp_apy=max_defined_apy(b.sp_apy for b in branches),
        branches=branches,
    )
