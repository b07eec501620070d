"""
tests/test_search_engine.py

Unit tests for Component 7: Search Engine.

The engine is exercised on small hand-built graphs so that expansion order
and statistics can be checked exactly.
"""

from typing import Dict, List, Tuple

import pytest

from component_7_search_engine import (
    Edge,
    NodeArena,
    SearchGraph,
    SearchNode,
    a_star_search,
)
from gripper_exceptions import SearchExhausted, SearchTimeout

# ==================== Helper Graphs ====================


class LineGraph(SearchGraph[int]):
    """Integers 0..length connected to their neighbours."""

    def __init__(self, length: int):
        self.length = length
        self.previous_actions = []

    def successors(self, state, previous_action=None):
        self.previous_actions.append(previous_action)
        if state > 0:
            yield Edge(action="dec", state=state - 1)
        if state < self.length:
            yield Edge(action="inc", state=state + 1)


class DictGraph(SearchGraph[str]):
    """Explicit adjacency lists of (target, cost)."""

    def __init__(self, edges: Dict[str, List[Tuple[str, float]]]):
        self.edges = edges

    def successors(self, state, previous_action=None):
        for target, cost in self.edges.get(state, []):
            yield Edge(action=f"{state}->{target}", state=target, cost=cost)


# ==================== Basic Search ====================


class TestBasicSearch:
    """Test path finding and path reconstruction."""

    def test_straight_line(self):
        graph = LineGraph(10)

        result = a_star_search(graph, 0, lambda s: s == 5, lambda s: abs(5 - s), None)

        assert result.cost == 5
        assert result.states == [0, 1, 2, 3, 4, 5]
        assert [node.action for node in result.path] == [None] + ["inc"] * 5

    def test_start_is_goal(self):
        result = a_star_search(LineGraph(3), 2, lambda s: s == 2, lambda s: 0, 1.0)

        assert len(result.path) == 1
        assert result.cost == 0
        assert result.statistics.expansions == 0

    def test_cheapest_path_with_zero_heuristic(self):
        graph = DictGraph(
            {
                "A": [("B", 1), ("C", 5)],
                "B": [("C", 1)],
                "C": [("D", 1)],
            }
        )

        result = a_star_search(graph, "A", lambda s: s == "D", lambda s: 0, None)

        assert result.states == ["A", "B", "C", "D"]
        assert result.cost == 3

    def test_previous_action_is_passed(self):
        graph = LineGraph(3)

        a_star_search(graph, 0, lambda s: s == 2, lambda s: abs(2 - s), None)

        assert graph.previous_actions[0] is None
        assert graph.previous_actions[1] == "inc"

    def test_parent_handles_form_path(self):
        result = a_star_search(LineGraph(4), 0, lambda s: s == 3, lambda s: 3 - s, None)

        assert result.path[0].parent is None
        assert all(node.parent is not None for node in result.path[1:])


# ==================== Duplicate Handling ====================


class TestLazyDuplicates:
    """Test that duplicate frontier entries are filtered at pop time."""

    def test_duplicate_skipped(self):
        graph = DictGraph(
            {
                "A": [("B", 1), ("C", 1)],
                "B": [("D", 1)],
                "C": [("D", 1)],
                "D": [("E", 1)],
            }
        )

        result = a_star_search(graph, "A", lambda s: s == "E", lambda s: 0, None)

        assert result.cost == 3
        assert result.statistics.duplicates_skipped == 1
        # A, B, C and D are each expanded once
        assert result.statistics.expansions == 4

    def test_closed_states_not_regenerated(self):
        graph = LineGraph(2)

        result = a_star_search(graph, 0, lambda s: s == 2, lambda s: 0, None)

        # 0 -> 1 -> 2: the edge back to 0 from 1 is never pushed
        assert result.statistics.generated == 2


# ==================== Failures ====================


class TestFailures:
    """Test typed failures and their statistics."""

    def test_exhausted(self):
        graph = LineGraph(4)

        with pytest.raises(SearchExhausted) as exc_info:
            a_star_search(graph, 0, lambda s: s == 99, lambda s: 0, None)

        assert exc_info.value.statistics.expansions == 5
        assert exc_info.value.context["expansions"] == 5

    def test_zero_budget_times_out(self):
        with pytest.raises(SearchTimeout) as exc_info:
            a_star_search(LineGraph(100), 0, lambda s: s == 50, lambda s: 0, 0)

        assert exc_info.value.statistics is not None
        assert exc_info.value.statistics.expansions == 0

    def test_timeout_is_not_exhaustion(self):
        assert not issubclass(SearchTimeout, SearchExhausted)
        assert not issubclass(SearchExhausted, SearchTimeout)


# ==================== Statistics ====================


class TestStatistics:
    """Test that statistics belong to a single call."""

    def test_independent_runs(self):
        first = a_star_search(LineGraph(10), 0, lambda s: s == 7, lambda s: 0, None)
        second = a_star_search(LineGraph(10), 0, lambda s: s == 7, lambda s: 0, None)

        assert first.statistics is not second.statistics
        assert first.statistics.expansions == second.statistics.expansions

    def test_counts(self):
        result = a_star_search(LineGraph(10), 0, lambda s: s == 3, lambda s: 3 - s, None)
        stats = result.statistics

        assert stats.expansions == 3
        assert stats.goal_tests == 4
        assert stats.max_frontier_size >= 1
        assert stats.elapsed_seconds >= 0
        assert set(stats.to_dict()) == {
            "expansions",
            "generated",
            "duplicates_skipped",
            "goal_tests",
            "max_frontier_size",
            "elapsed_seconds",
        }


class TestNodeArena:
    """Test handle-based node storage."""

    def test_path_to(self):
        arena = NodeArena()
        root = arena.add(SearchNode(state="r", g=0, h=2))
        child = arena.add(SearchNode(state="c", g=1, h=1, parent=root, action="x"))
        leaf = arena.add(SearchNode(state="l", g=2, h=0, parent=child, action="y"))

        path = arena.path_to(leaf)

        assert [node.state for node in path] == ["r", "c", "l"]
        assert len(arena) == 3
        assert arena[child].f == 2
