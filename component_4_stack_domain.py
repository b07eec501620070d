"""
Component 4: Stack World Domain

State-space adapter connecting the stack world to the generic search engine:
- Action enum (left, right, pick, drop) with short commands l/r/p/d
- Legality checks for each action, including physical support for drops
- Successor generation with optional pruning of immediate reversals
- apply_action for replaying plans

Every legal action costs EDGE_COST and produces a fresh copy of the state.

Author: Gripper Planner Team
Date: 2026-10-19
"""

from enum import Enum
from typing import Iterator, List, Optional

from common.constants import EDGE_COST
from component_1_logging_config import get_logger
from component_2_world_model import ObjectCatalog, WorldState
from component_3_support_rules import support_violation
from component_7_search_engine import Edge, SearchGraph
from gripper_exceptions import IllegalActionError

logger = get_logger(__name__)


class Action(Enum):
    """Arm actions."""

    LEFT = "left"
    RIGHT = "right"
    PICK = "pick"
    DROP = "drop"

    @property
    def command(self) -> str:
        """Single-letter command understood by the arm controller."""
        return self.value[0]

    @property
    def reverse(self) -> "Action":
        """Action that exactly undoes this one."""
        return _REVERSE[self]

    @classmethod
    def from_command(cls, command: str) -> "Action":
        for action in cls:
            if action.value == command or action.command == command:
                return action
        raise ValueError(f"Unknown arm command: {command!r}")

    def __str__(self) -> str:
        return self.value


_REVERSE = {
    Action.LEFT: Action.RIGHT,
    Action.RIGHT: Action.LEFT,
    Action.PICK: Action.DROP,
    Action.DROP: Action.PICK,
}


class StackWorldGraph(SearchGraph[WorldState]):
    """
    Transition system of the stack world.

    Attributes:
        catalog: Object definitions used by the support rules
        prune_reversals: Skip the action that undoes the previous one.
            The undone state is already closed, so no path is lost.
    """

    def __init__(self, catalog: ObjectCatalog, prune_reversals: bool = True):
        self.catalog = catalog
        self.prune_reversals = prune_reversals

    # ------------------------------------------------------------------
    # Legality
    # ------------------------------------------------------------------

    def drop_violation(self, state: WorldState) -> Optional[str]:
        """Why dropping here is illegal, or None if the drop is legal."""
        if state.holding is None:
            return "gripper is empty"

        top = state.top(state.arm)
        return support_violation(
            self.catalog[top] if top is not None else None,
            self.catalog[state.holding],
        )

    def is_legal(self, state: WorldState, action: Action) -> bool:
        if action is Action.LEFT:
            return state.arm > 0
        if action is Action.RIGHT:
            return state.arm < state.num_columns - 1
        if action is Action.PICK:
            return state.holding is None and bool(state.stacks[state.arm])
        return self.drop_violation(state) is None

    def legal_actions(self, state: WorldState) -> List[Action]:
        return [action for action in Action if self.is_legal(state, action)]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, state: WorldState, action: Action) -> WorldState:
        new_state = state.copy()
        if action is Action.LEFT:
            new_state.arm -= 1
        elif action is Action.RIGHT:
            new_state.arm += 1
        elif action is Action.PICK:
            new_state.holding = new_state.stacks[new_state.arm].pop()
        else:
            new_state.stacks[new_state.arm].append(new_state.holding)
            new_state.holding = None
        return new_state

    def apply_action(self, state: WorldState, action: Action) -> WorldState:
        """
        Return the state after ``action``; ``state`` itself is left untouched.

        Raises:
            IllegalActionError: if the action is not legal in ``state``
        """
        if not self.is_legal(state, action):
            reason = (
                self.drop_violation(state) if action is Action.DROP else "precondition failed"
            )
            logger.debug(
                f"Illegal {action.value}: {reason}", extra={"state": state.to_string()}
            )
            raise IllegalActionError(
                f"Cannot {action.value}: {reason}",
                action=action.value,
                context={"state": state.to_string()},
            )
        return self._transition(state, action)

    def successors(
        self, state: WorldState, previous_action: Optional[Action] = None
    ) -> Iterator[Edge[WorldState]]:
        for action in Action:
            if (
                self.prune_reversals
                and previous_action is not None
                and action is previous_action.reverse
            ):
                continue

            if self.is_legal(state, action):
                yield Edge(
                    action=action, state=self._transition(state, action), cost=EDGE_COST
                )
