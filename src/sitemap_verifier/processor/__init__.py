"""Outcome statistics module."""

from .stats_calculator import calculate_stats, get_empty_stats, group_errors_by_type

__all__ = ["calculate_stats", "get_empty_stats", "group_errors_by_type"]
