"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

# Block height, block hash, or a tag such as "latest".
SnapshotReference = int | str


@dataclass(frozen=True)
class BranchContracts:
    """Contract addresses of one collateral branch."""

    coll_token: str
    active_pool: str
    default_pool: str
    price_feed: str
    stability_pool: str
    coll_symbol: str = ""


@dataclass(frozen=True)
class Deployment:
    """Protocol deployment descriptor."""

    bold_token: str
    sp_yield_split: Decimal
    branches: tuple[BranchContracts, ...] = ()


@dataclass(frozen=True)
class RawBranchFields:
    """Branch state as read from chain, already converted to decimals."""

    coll_symbol: str
    coll_active: Decimal
    coll_default: Decimal
    coll_price: Decimal
    sp_deposits: Decimal
    interest_accrual_1y: Decimal
    interest_pending: Decimal
    batch_management_fees: Decimal
    batch_management_fee_pending: Decimal


@dataclass(frozen=True)
class BranchMetrics:
    """Raw branch fields plus the metrics derived from them."""

    raw: RawBranchFields
    batch_management_fees_pending: Decimal
    debt_pending: Decimal
    coll_value: Decimal
    value_locked: Decimal
    sp_apy: float | None = None

    @property
    def coll_symbol(self) -> str:
        return self.raw.coll_symbol

    @property
    def sp_deposits(self) -> Decimal:
        return self.raw.sp_deposits


@dataclass(frozen=True)
class ProtocolSummary:
    """Protocol-wide totals over every branch."""

    total_bold_supply: Decimal
    total_debt_pending: Decimal
    total_coll_value: Decimal
    total_sp_deposits: Decimal
    total_value_locked: Decimal
    max_sp_apy: float | None = None
    branches: tuple[BranchMetrics, ...] = ()
