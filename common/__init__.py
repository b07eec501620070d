"""
Common constants for the gripper planner.

This package provides the centralized tuning values shared by the search
engine, heuristics and planner facade.
"""

from common.constants import *

__all__ = [
    # World Model
    "FLOOR",
    # Transition Costs
    "EDGE_COST",
    # Heuristic Tuning
    "RELOCATION_COST",
    "HEURISTIC_CACHE_MAXSIZE",
    # Search Limits
    "DEFAULT_TIME_BUDGET_SECONDS",
    "SEARCH_PROGRESS_LOG_INTERVAL",
]
