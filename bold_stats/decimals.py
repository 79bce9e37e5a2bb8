"""Exact decimal helpers — no I/O.

On-chain quantities are uint256 values in 18-decimal fixed point. They are
converted to ``Decimal`` under ``EXACT``, a context whose precision covers
any product of two uint256 values and which traps ``Inexact``, so no
arithmetic done under it can silently round.
"""
from __future__ import annotations

from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
)

WEI_DECIMALS = 18

EXACT = Context(
    prec=256,
    traps=[Inexact, InvalidOperation, DivisionByZero, Overflow],
)

ZERO = Decimal(0)

# One wei as a decimal (1e-18).
ONE_WEI = Decimal(1).scaleb(-WEI_DECIMALS)


def from_wei(raw: int) -> Decimal:
    """Interpret a uint256 as an 18-decimal fixed-point number.

    Examples:
        10**18 → Decimal("1.000000000000000000")
        5 * 10**17 → Decimal("0.500000000000000000")
    """
    if raw < 0:
        raise ValueError(f"Expected a non-negative integer, got {raw}")
    return Decimal(raw).scaleb(-WEI_DECIMALS, context=EXACT)


def parse_wei_string(value: str) -> Decimal:
    """Parse a decimal or ``0x``-hex wei string (as found in deployment manifests)."""
    text = value.strip()
    base = 16 if text.lower().startswith("0x") else 10
    return from_wei(int(text, base))


def to_canonical_str(value: Decimal) -> str:
    """Render a decimal as plain text without exponent or trailing zeros.

    ``Decimal(to_canonical_str(x)) == x`` holds for every finite ``x``.
    """
    if not value.is_finite():
        raise ValueError(f"Cannot render non-finite decimal {value}")
    text = format(value.normalize(EXACT), "f")
    return "0" if text in ("-0", "0") else text
