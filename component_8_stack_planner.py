"""
Component 8: Stack Planner

Facade tying the stack world together:
- StackPlanner.plan: A* search from a world state to a DNF goal
- assemble_plan: turns the search path into the ordered action list
- Plan validation and simulation (replay a plan step by step)

Search failures (SearchTimeout, SearchExhausted) propagate to the caller
unchanged; choosing between interpretations or retrying is the caller's job.

Author: Gripper Planner Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from common.constants import DEFAULT_TIME_BUDGET_SECONDS
from component_1_logging_config import PerformanceLogger, get_logger
from component_2_world_model import (
    DNFFormula,
    ObjectCatalog,
    WorldState,
    format_formula,
    load_world,
    parse_formula,
)
from component_4_stack_domain import Action, StackWorldGraph
from component_5_goal_test import is_goal
from component_6_heuristics import ConjunctionCostStrategy, StackHeuristic
from component_7_search_engine import (
    SearchNode,
    SearchStatistics,
    a_star_search,
)
from gripper_exceptions import IllegalActionError

logger = get_logger(__name__)

WORLDS_DIR = Path(__file__).parent / "worlds"


@dataclass
class PlanResult:
    """
    Outcome of a successful planning call.

    Attributes:
        actions: Ordered arm actions (empty if the goal already holds)
        cost: Total cost (equals the number of actions)
        statistics: Search counters
    """

    actions: List[Action]
    cost: int
    statistics: SearchStatistics = field(default_factory=SearchStatistics)

    @property
    def commands(self) -> List[str]:
        """Single-letter commands, e.g. ["p", "r", "d"]."""
        return [action.command for action in self.actions]

    @property
    def labels(self) -> List[str]:
        return [action.value for action in self.actions]

    @property
    def already_satisfied(self) -> bool:
        return not self.actions


def assemble_plan(path: Sequence[SearchNode]) -> List[Action]:
    """Action labels along a search path; the root node carries no action."""
    return [node.action for node in path[1:]]


class StackPlanner:
    """
    A* planner for the single-arm stack world.

    Features:
    - Forward search guided by the relation-specific heuristic
    - Configurable conjunction cost strategy (SUM or MAX)
    - Wall-clock time budget per planning call
    - Plan validation and simulation
    """

    def __init__(
        self,
        catalog: ObjectCatalog,
        time_budget: Optional[float] = DEFAULT_TIME_BUDGET_SECONDS,
        strategy: ConjunctionCostStrategy = ConjunctionCostStrategy.SUM,
        prune_reversals: bool = True,
    ):
        """
        Initialize planner.

        Args:
            catalog: Object definitions for every entity in the world
            time_budget: Seconds allowed per search (None for unlimited)
            strategy: How literal costs combine inside a conjunction
            prune_reversals: Skip actions that undo the previous action
        """
        self.catalog = catalog
        self.time_budget = time_budget
        self.strategy = strategy
        self.graph = StackWorldGraph(catalog, prune_reversals=prune_reversals)

    def plan(self, formula: DNFFormula, state: WorldState) -> PlanResult:
        """
        Find an action sequence leading from ``state`` to a state satisfying ``formula``.

        Raises:
            SearchTimeout: the time budget ran out
            SearchExhausted: the goal is unreachable
        """
        logger.info(
            "Planning started",
            extra={
                "goal": format_formula(formula),
                "columns": state.num_columns,
                "entities": len(state.entities()),
            },
        )

        estimator = StackHeuristic(formula, strategy=self.strategy)

        with PerformanceLogger(
            logger.logger, "A* search", strategy=self.strategy.value
        ):
            result = a_star_search(
                self.graph,
                state,
                lambda s: is_goal(formula, s),
                estimator,
                self.time_budget,
            )

        actions = assemble_plan(result.path)
        logger.info(
            f"Plan found! Length: {len(actions)}, Expansions: {result.statistics.expansions}",
            extra={
                "plan": " ".join(action.command for action in actions),
                "heuristic_cache_hits": estimator.hits,
            },
        )
        return PlanResult(
            actions=actions, cost=int(result.cost), statistics=result.statistics
        )

    def simulate_plan(
        self, state: WorldState, actions: Sequence[Action]
    ) -> List[WorldState]:
        """
        Execute a plan and return the state trajectory (initial state included).

        Raises:
            IllegalActionError: at the first step that cannot be executed
        """
        states = [state.copy()]
        current = state
        for index, action in enumerate(actions):
            try:
                current = self.graph.apply_action(current, action)
            except IllegalActionError as e:
                e.context["step_index"] = index
                raise
            states.append(current)
        return states

    def validate_plan(
        self, formula: DNFFormula, state: WorldState, actions: Sequence[Action]
    ) -> Tuple[bool, Optional[str]]:
        """
        Check that ``actions`` is executable and reaches ``formula``.

        Returns:
            (success, error_message)
        """
        try:
            final_state = self.simulate_plan(state, actions)[-1]
        except IllegalActionError as e:
            return False, f"Action {e.context['step_index']} ({e.context['action']}) failed: {e.message}"

        if not is_goal(formula, final_state):
            return False, "Final state does not satisfy goal"

        return True, None


def plan_actions(
    formula: DNFFormula,
    state: WorldState,
    catalog: ObjectCatalog,
    time_budget: Optional[float] = DEFAULT_TIME_BUDGET_SECONDS,
) -> PlanResult:
    """Plan with default settings."""
    return StackPlanner(catalog, time_budget=time_budget).plan(formula, state)


def main():
    """Example usage: plan a goal in the small example world."""
    from component_1_logging_config import setup_logging

    setup_logging()

    world = load_world(WORLDS_DIR / "small.yml")
    formula = parse_formula("ontop(e,floor) & inside(f,k)")

    planner = StackPlanner(world.catalog)
    result = planner.plan(formula, world.state)

    print(f"World: {world.state.to_string()}")
    print(f"Goal:  {format_formula(formula)}")
    print(f"Plan:  {' '.join(result.commands) or 'already true'} (cost {result.cost})")
    print(f"Stats: {result.statistics.to_dict()}")


if __name__ == "__main__":
    main()
