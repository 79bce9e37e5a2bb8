"""Exceptions raised by the stats pipeline."""


class StatsError(Exception):
    """Base exception for bold-stats errors."""


class RpcError(StatsError, RuntimeError):
    """A chain read failed (transport error, reverted call, unknown block)."""


class EmptyBranchSetError(StatsError, ValueError):
    """Raised when reducing protocol totals over zero branches."""
