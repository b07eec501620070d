"""
Component 7: Search Engine

Generic best-first (A*) search over any graph exposing a successor function:
- SearchGraph interface and Edge type
- SearchNode records stored in a NodeArena, addressed by integer handles
- Lazy duplicate detection (closed set checked at pop time)
- Wall-clock time budget, checked once per frontier pop
- SearchStatistics returned with every result or failure

Closed states are never re-opened. With an inconsistent heuristic the
returned path can be longer than optimal; the search still terminates and
finds a path whenever one exists and time allows.

Author: Gripper Planner Team
Date: 2026-10-19
"""

import heapq
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, Iterable, List, Optional, TypeVar

from common.constants import SEARCH_PROGRESS_LOG_INTERVAL
from component_1_logging_config import get_logger
from gripper_exceptions import SearchExhausted, SearchTimeout

logger = get_logger(__name__)

S = TypeVar("S", bound=Hashable)


# ============================================================================
# Graph Interface
# ============================================================================


@dataclass(frozen=True)
class Edge(Generic[S]):
    """Transition produced by a graph: the action label, the target state and its cost."""

    action: Any
    state: S
    cost: float = 1


class SearchGraph(ABC, Generic[S]):
    """Graph explored by a_star_search."""

    @abstractmethod
    def successors(self, state: S, previous_action: Any = None) -> Iterable[Edge[S]]:
        """
        Enumerate outgoing edges of ``state``.

        Args:
            state: State being expanded
            previous_action: Action that produced ``state`` (None at the root).
                Graphs may use it to skip transitions that undo it.
        """


# ============================================================================
# Search Nodes
# ============================================================================


@dataclass
class SearchNode(Generic[S]):
    """
    One entry of the search tree.

    Attributes:
        state: State reached by this node
        g: Accumulated path cost
        h: Heuristic estimate to the goal
        parent: Arena handle of the parent node (None for the root)
        action: Action that produced this node (None for the root)
    """

    state: S
    g: float
    h: float
    parent: Optional[int] = None
    action: Any = None

    @property
    def f(self) -> float:
        return self.g + self.h


class NodeArena(Generic[S]):
    """
    Owns every node created during one search call.

    Nodes refer to their parents by integer handle, so the whole tree is
    released at once when the arena goes out of scope.
    """

    def __init__(self) -> None:
        self._nodes: List[SearchNode[S]] = []

    def add(self, node: SearchNode[S]) -> int:
        self._nodes.append(node)
        return len(self._nodes) - 1

    def __getitem__(self, handle: int) -> SearchNode[S]:
        return self._nodes[handle]

    def __len__(self) -> int:
        return len(self._nodes)

    def path_to(self, handle: int) -> List[SearchNode[S]]:
        """Nodes from the root to ``handle``, root first."""
        path = []
        current: Optional[int] = handle
        while current is not None:
            node = self._nodes[current]
            path.append(node)
            current = node.parent
        path.reverse()
        return path


# ============================================================================
# Results
# ============================================================================


@dataclass
class SearchStatistics:
    """Counters for one search call."""

    expansions: int = 0
    generated: int = 0
    duplicates_skipped: int = 0
    goal_tests: int = 0
    max_frontier_size: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict:
        return {
            "expansions": self.expansions,
            "generated": self.generated,
            "duplicates_skipped": self.duplicates_skipped,
            "goal_tests": self.goal_tests,
            "max_frontier_size": self.max_frontier_size,
            "elapsed_seconds": round(self.elapsed_seconds, 4),
        }


@dataclass
class SearchResult(Generic[S]):
    """
    Successful search outcome.

    Attributes:
        path: Nodes from the start node to the goal node
        cost: Total path cost (g of the goal node)
        statistics: Counters for the run
    """

    path: List[SearchNode[S]]
    cost: float
    statistics: SearchStatistics = field(default_factory=SearchStatistics)

    @property
    def states(self) -> List[S]:
        return [node.state for node in self.path]


# ============================================================================
# A* Search
# ============================================================================


def a_star_search(
    graph: SearchGraph[S],
    start: S,
    is_goal: Callable[[S], bool],
    heuristic: Callable[[S], float],
    time_budget: Optional[float],
) -> SearchResult[S]:
    """
    Best-first search ordered by f = g + h.

    Args:
        graph: Successor provider
        start: Initial state
        is_goal: Goal predicate
        heuristic: Estimate of the remaining cost from a state
        time_budget: Wall-clock limit in seconds (None for unlimited)

    Returns:
        SearchResult with the path from ``start`` to the first goal state popped

    Raises:
        SearchTimeout: the budget elapsed before a goal was found
        SearchExhausted: every reachable state was expanded without reaching a goal
    """
    stats = SearchStatistics()
    started = time.perf_counter()
    deadline = None if time_budget is None else started + time_budget

    arena: NodeArena[S] = NodeArena()
    closed = set()

    # Entries are (f, insertion counter, handle); the counter keeps ties FIFO
    frontier = []
    counter = 0

    root = arena.add(SearchNode(state=start, g=0, h=heuristic(start)))
    heapq.heappush(frontier, (arena[root].f, counter, root))

    logger.debug("Search started", extra={"h0": arena[root].h, "time_budget": time_budget})

    while True:
        if not frontier:
            stats.elapsed_seconds = time.perf_counter() - started
            logger.warning(
                "Search exhausted without reaching the goal", extra=stats.to_dict()
            )
            raise SearchExhausted("No path to a goal state exists", statistics=stats)

        now = time.perf_counter()
        if deadline is not None and now >= deadline:
            stats.elapsed_seconds = now - started
            logger.warning("Search timed out", extra=stats.to_dict())
            raise SearchTimeout(
                f"Reached timeout of {time_budget}s before finding a path",
                statistics=stats,
            )

        _, _, handle = heapq.heappop(frontier)
        node = arena[handle]

        if node.state in closed:
            stats.duplicates_skipped += 1
            continue

        stats.goal_tests += 1
        if is_goal(node.state):
            stats.elapsed_seconds = time.perf_counter() - started
            path = arena.path_to(handle)
            logger.debug(
                f"Goal reached at cost {node.g}",
                extra={**stats.to_dict(), "arena_size": len(arena)},
            )
            return SearchResult(path=path, cost=node.g, statistics=stats)

        closed.add(node.state)
        stats.expansions += 1

        if stats.expansions % SEARCH_PROGRESS_LOG_INTERVAL == 0:
            logger.debug(
                "Search progress",
                extra={
                    "expansions": stats.expansions,
                    "frontier": len(frontier),
                    "best_f": node.f,
                },
            )

        for edge in graph.successors(node.state, node.action):
            if edge.state in closed:
                continue

            child = SearchNode(
                state=edge.state,
                g=node.g + edge.cost,
                h=heuristic(edge.state),
                parent=handle,
                action=edge.action,
            )
            counter += 1
            heapq.heappush(frontier, (child.f, counter, arena.add(child)))
            stats.generated += 1

        if len(frontier) > stats.max_frontier_size:
            stats.max_frontier_size = len(frontier)
