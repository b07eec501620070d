"""
Component 6: Planning Heuristics

Cost estimates guiding the search towards states that satisfy a DNF goal:
- One estimator per Relation, selected through a dispatch table
- ConjunctionCostStrategy: SUM (default) or MAX over the literals of a conjunction
- StackHeuristic: binds a goal formula and memoises estimates per state

The estimate of a formula is the minimum over its conjunctions. SUM
deliberately overestimates multi-literal goals (it is not admissible) in
exchange for faster searches; MAX is the more conservative alternative.

Every per-literal estimate is 0 exactly when the goal test considers the
literal satisfied, and at least 1 otherwise.

Author: Gripper Planner Team
Date: 2026-10-19
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from cachetools import LRUCache

from common.constants import HEURISTIC_CACHE_MAXSIZE, RELOCATION_COST
from component_1_logging_config import get_logger
from component_2_world_model import DNFFormula, Literal, Relation, WorldState

logger = get_logger(__name__)

# ============================================================================
# Position Helpers
# ============================================================================


def _position(state: WorldState, entity: str) -> Tuple[int, Optional[int]]:
    """Column and stack position; a held entity sits at the arm with no position."""
    location = state.locate(entity)
    if location is None:
        return state.arm, None
    return location


def _num_above(state: WorldState, column: int, position: Optional[int]) -> int:
    if position is None:
        return 0
    return len(state.stacks[column]) - position - 1


# ============================================================================
# Per-Relation Estimators
# ============================================================================

Estimator = Callable[[WorldState, str, Optional[str], int], int]


def _estimate_holding(state: WorldState, x: str, _y: Optional[str], reloc: int) -> int:
    if state.holding == x:
        return 0

    column, position = _position(state, x)
    # Something already held has to be dropped first
    hand = 1 if state.holding is None else 2
    return abs(state.arm - column) + reloc * _num_above(state, column, position) + hand


def _estimate_leftof(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    arm, last = state.arm, state.num_columns - 1
    fc, fp = _position(state, x)
    sc, sp = _position(state, y)
    above_x = _num_above(state, fc, fp)
    above_y = _num_above(state, sc, sp)

    if fp is not None and sp is not None:
        if fc < sc:
            return 0

        distance = abs(fc - sc)
        # Entities on a boundary column can only be fixed by moving the other one
        if sc == 0 and fc == last:
            return (
                min(abs(fc - arm), abs(sc - arm))
                + 2 * distance
                + reloc * (above_x + above_y)
                + 2
            )
        if sc == 0:
            return abs(sc - arm) + reloc * above_y + 1 + distance + 2
        if fc == last:
            return abs(fc - arm) + reloc * above_x + 1 + distance + 2
        return (
            min(abs(fc - arm) + reloc * above_x, abs(sc - arm) + reloc * above_y)
            + 1
            + distance
            + 2
        )

    if state.holding == x:
        if arm < sc:
            return 1
        cost = arm - sc + 2
        if sc == 0:
            cost += reloc * above_y + 3
        return cost

    if arm > fc:
        return 1
    cost = fc - arm + 2
    if fc == last:
        cost += reloc * above_x + 3
    return cost


def _estimate_rightof(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    return _estimate_leftof(state, y, x, reloc)


def _estimate_beside(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    arm = state.arm
    fc, fp = _position(state, x)
    sc, sp = _position(state, y)

    if fp is not None and sp is not None:
        if abs(fc - sc) == 1:
            return 0
        return (
            min(
                abs(fc - arm) + reloc * _num_above(state, fc, fp),
                abs(sc - arm) + reloc * _num_above(state, sc, sp),
            )
            + 1
            + abs(fc - sc)
        )

    # Holding one of them: carry it next to the other and drop
    other_column = sc if fp is None else fc
    targets = [c for c in (other_column - 1, other_column + 1) if 0 <= c < state.num_columns]
    if not targets:
        return 1
    return min(abs(arm - c) for c in targets) + 1


def _estimate_ontop(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    arm = state.arm
    fc, fp = _position(state, x)
    sc, sp = _position(state, y)
    above_y = _num_above(state, sc, sp)

    if fp is not None and sp is not None and fc == sc and fp == sp + 1:
        return 0

    if state.holding == x:
        return abs(sc - arm) + reloc * above_y + 1

    return (
        abs(fc - arm)
        + reloc * _num_above(state, fc, fp)
        + 1
        + abs(fc - sc)
        + reloc * above_y
        + 1
    )


def _estimate_ontop_floor(state: WorldState, x: str, reloc: int) -> int:
    arm, columns = state.arm, range(state.num_columns)
    fc, fp = _position(state, x)

    if fp == 0:
        return 0

    heights = [len(stack) for stack in state.stacks]

    if fp is None:
        # Clearing a column costs one relocation per entity on it
        return 1 + min(abs(arm - c) + reloc * heights[c] for c in columns)

    others = [c for c in columns if c != fc]
    clear_target = (
        min(abs(fc - c) + reloc * heights[c] for c in others) if others else reloc * fp
    )
    return abs(fc - arm) + reloc * _num_above(state, fc, fp) + 1 + clear_target + 1


def _estimate_above(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    arm = state.arm
    fc, fp = _position(state, x)
    sc, sp = _position(state, y)

    if fp is not None and sp is not None and fc == sc and fp > sp:
        return 0

    if state.holding == x:
        return abs(sc - arm) + 1

    return abs(fc - arm) + reloc * _num_above(state, fc, fp) + 1 + abs(fc - sc) + 1


def _estimate_under(state: WorldState, x: str, y: Optional[str], reloc: int) -> int:
    return _estimate_above(state, y, x, reloc)


_ESTIMATORS: Dict[Relation, Estimator] = {
    Relation.HOLDING: _estimate_holding,
    Relation.LEFTOF: _estimate_leftof,
    Relation.RIGHTOF: _estimate_rightof,
    Relation.BESIDE: _estimate_beside,
    Relation.ONTOP: _estimate_ontop,
    Relation.INSIDE: _estimate_ontop,
    Relation.ABOVE: _estimate_above,
    Relation.UNDER: _estimate_under,
}


def literal_estimate(
    literal: Literal, state: WorldState, relocation_cost: int = RELOCATION_COST
) -> int:
    """Estimated number of actions until ``literal`` holds (0 if it already does)."""
    if literal.refers_to_floor:
        if literal.relation is Relation.ONTOP:
            return _estimate_ontop_floor(state, literal.first, relocation_cost)
        # Not evaluated by the goal test either
        return 0

    return _ESTIMATORS[literal.relation](
        state, literal.first, literal.second, relocation_cost
    )


# ============================================================================
# Formula Estimate
# ============================================================================


class ConjunctionCostStrategy(Enum):
    """How per-literal estimates combine within one conjunction."""

    SUM = "sum"
    MAX = "max"

    def combine(self, costs: List[int]) -> int:
        if self is ConjunctionCostStrategy.SUM:
            return sum(costs)
        return max(costs, default=0)


def heuristic(
    formula: DNFFormula,
    state: WorldState,
    strategy: ConjunctionCostStrategy = ConjunctionCostStrategy.SUM,
    relocation_cost: int = RELOCATION_COST,
) -> int:
    """
    Estimate the cost of reaching any conjunction of ``formula``.

    Only positive literals are considered.
    """
    return min(
        strategy.combine(
            [
                literal_estimate(literal, state, relocation_cost)
                for literal in conjunction
                if literal.polarity
            ]
        )
        for conjunction in formula
    )


class Heuristic:
    """Base class for planning heuristics."""

    def estimate(self, state: WorldState) -> float:
        """Estimate cost from state to goal."""
        raise NotImplementedError

    def __call__(self, state: WorldState) -> float:
        return self.estimate(state)


class StackHeuristic(Heuristic):
    """
    Goal-bound heuristic for the stack world.

    Estimates are memoised in an LRU cache keyed by state, since the search
    evaluates the same state repeatedly when it reaches it along several paths.
    """

    def __init__(
        self,
        formula: DNFFormula,
        strategy: ConjunctionCostStrategy = ConjunctionCostStrategy.SUM,
        relocation_cost: int = RELOCATION_COST,
        cache_size: int = HEURISTIC_CACHE_MAXSIZE,
    ):
        self.formula = formula
        self.strategy = strategy
        self.relocation_cost = relocation_cost
        self._cache = LRUCache(maxsize=cache_size) if cache_size > 0 else None
        self.hits = 0
        self.misses = 0

    def estimate(self, state: WorldState) -> int:
        if self._cache is None:
            return heuristic(self.formula, state, self.strategy, self.relocation_cost)

        key = state.key()
        if key in self._cache:
            self.hits += 1
            return self._cache[key]

        self.misses += 1
        value = heuristic(self.formula, state, self.strategy, self.relocation_cost)
        self._cache[key] = value
        return value
