"""Service modules"""
from .stats import StatsResult, StatsService, fetch_stats, fetch_summary

__all__ = ["StatsResult", "StatsService", "fetch_stats", "fetch_summary"]
