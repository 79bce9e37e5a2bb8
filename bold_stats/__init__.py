"""Point-in-time statistics for Liquity v2 style multi-branch lending protocols."""

__version__ = "0.1.0"
