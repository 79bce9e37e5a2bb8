"""Render a ProtocolSummary as the string-valued stats record."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from .decimals import to_canonical_str
from .models import BranchMetrics, ProtocolSummary

NAN = "NaN"


def format_rate(value: float | None) -> str:
    """Render a yield estimate; undefined rates become ``"NaN"``."""
    if value is None:
        return NAN
    if value.is_integer():
        return str(int(value))
    # shortest round-trip digits, positional form
    return to_canonical_str(Decimal(repr(value)))


def format_branch(branch: BranchMetrics) -> dict[str, str]:
    raw = branch.raw
    return {
        "coll_active": to_canonical_str(raw.coll_active),
        "coll_default": to_canonical_str(raw.coll_default),
        "coll_price": to_canonical_str(raw.coll_price),
        "sp_deposits": to_canonical_str(raw.sp_deposits),
        "interest_accrual_1y": to_canonical_str(raw.interest_accrual_1y),
        "interest_pending": to_canonical_str(raw.interest_pending),
        "batch_management_fees_pending": to_canonical_str(
            branch.batch_management_fees_pending
        ),
        "debt_pending": to_canonical_str(branch.debt_pending),
        "coll_value": to_canonical_str(branch.coll_value),
        "sp_apy": format_rate(branch.sp_apy),
        "value_locked": to_canonical_str(branch.value_locked),
    }


def format_summary(summary: ProtocolSummary) -> dict[str, Any]:
    """Build the output record.

    Branches are keyed by collateral symbol in input order. Symbols are
    unique within a deployment; a repeated symbol overwrites the earlier
    entry.
    """
    branch: dict[str, dict[str, str]] = {}
    for b in summary.branches:
        branch[b.coll_symbol] = format_branch(b)

    return {
        "total_bold_supply": to_canonical_str(summary.total_bold_supply),
        "total_debt_pending": to_canonical_str(summary.total_debt_pending),
        "total_coll_value": to_canonical_str(summary.total_coll_value),
        "total_sp_deposits": to_canonical_str(summary.total_sp_deposits),
        "total_value_locked": to_canonical_str(summary.total_value_locked),
        "max_sp_apy": format_rate(summary.max_sp_apy),
        "branch": branch,
    }
