"""Liquity v2 deployment loading and snapshot collection."""
from .collector import collect_snapshot
from .deployment import load_deployment, parse_deployment

__all__ = ["collect_snapshot", "load_deployment", "parse_deployment"]
