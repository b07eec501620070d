"""
Centralized constants for the gripper planner.

This module is the single source of truth for the tuning values used by the
search engine, the heuristic estimator and the planner facade.

Organization:
    - World Model: reserved tokens
    - Transition Costs: cost of one arm action
    - Heuristic Tuning: relocation estimate and memoisation size
    - Search Limits: default time budget and progress logging

Usage:
    from common.constants import DEFAULT_TIME_BUDGET_SECONDS, RELOCATION_COST

Note:
    These are defaults. StackPlanner and StackHeuristic accept constructor
    parameters that override them.
"""

# =============================================================================
# World Model
# =============================================================================

FLOOR: str = "floor"
"""
Reserved argument token naming the floor beneath every column.

Only meaningful as the second argument of an ``ontop`` literal.
"""

# =============================================================================
# Transition Costs
# =============================================================================

EDGE_COST: int = 1
"""
Cost of every legal arm action (left, right, pick, drop).

Since all edges cost the same, plan cost equals plan length.
"""

# =============================================================================
# Heuristic Tuning
# =============================================================================

RELOCATION_COST: int = 4
"""
Estimated number of actions needed to clear one entity off a target.

Approximates pick, move, drop and return. Multiplied by the number of
entities stacked above the entity that has to be exposed.
"""

HEURISTIC_CACHE_MAXSIZE: int = 100_000
"""
Maximum number of memoised heuristic values per planning call.

Duplicate frontier entries for the same state reuse the cached estimate.
"""

# =============================================================================
# Search Limits
# =============================================================================

DEFAULT_TIME_BUDGET_SECONDS: float = 100.0
"""
Wall-clock budget for one search call.

Checked once per frontier pop. Exceeding it raises SearchTimeout.
"""

SEARCH_PROGRESS_LOG_INTERVAL: int = 5_000
"""Emit a DEBUG progress line every N node expansions."""
