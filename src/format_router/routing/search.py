"""Lazy multi-path route search over a route graph."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field

from format_router.routing.dead_ends import DeadEndRegistry
from format_router.routing.graph import RouteGraph
from format_router.routing.paths import (
    PathStep,
    contains_category_chain,
    render_formats,
    render_path,
)
from format_router.types import RoutePath

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100


@dataclass(order=True)
class _FrontierEntry:
    cost: float
    sequence: int
    node_index: int = field(compare=False)
    path: RoutePath = field(compare=False)
    visited_border: int = field(compare=False)


class RouteSearch:
    """Pull-based iterator over candidate routes, cheapest first.

    Each ``next()`` call runs the priority-queue expansion until the next
    acceptable route reaches the goal, then suspends. Dropping the iterator
    cancels the search; it holds no resources.

    Nodes are closed when first expanded, but a frontier entry is only
    considered stale if its node was closed *before* the entry was queued
    (``visited_border``). Entries queued earlier stay live, which is what lets
    the search emit several distinct routes to the same node. Every ancestor
    of an entry was closed before that entry was queued, so emitted routes
    never revisit a node and the search always terminates.

    Parameters
    ----------
    graph : RouteGraph
        Graph to search.
    start : PathStep
        Origin step; its format's MIME type selects the start node.
    goal : PathStep
        Target step; its format's MIME type selects the goal node and its
        handler is the required final handler in advanced mode.
    simple_mode : bool, default=True
        Accept any final handler. When ``False`` and ``goal.handler`` is set,
        only routes whose last hop uses that handler are emitted.
    dead_ends : DeadEndRegistry | None, optional
        Shared registry checked at every dequeue.
    max_iterations : int | None, optional
        Stop after this many dequeues. ``None`` searches until exhaustion.
    """

    def __init__(
        self,
        graph: RouteGraph,
        start: PathStep,
        goal: PathStep,
        *,
        simple_mode: bool = True,
        dead_ends: DeadEndRegistry | None = None,
        max_iterations: int | None = None,
    ) -> None:
        self._graph = graph
        self._start = start
        self._goal = goal
        self._strict_goal_handler = not simple_mode
        self._dead_ends = dead_ends if dead_ends is not None else DeadEndRegistry()
        self._max_iterations = max_iterations
        self._frontier: list[_FrontierEntry] = []
        self._closed_at: dict[int, int] = {}
        self._closed_count = 0
        self._sequence = itertools.count()
        self._done = False
        self.iterations = 0
        self.paths_found = 0
        self.last_cost: float | None = None

        start_index = graph.node_index(start.format.mime)
        self._goal_index = graph.node_index(goal.format.mime)
        if start_index is None or self._goal_index is None:
            logger.info(
                "No route possible: %s or %s is not in the graph.",
                start.format.mime,
                goal.format.mime,
            )
            self._done = True
            return

        self._push(start_index, 0.0, (start,), visited_border=0)
        logger.info(
            "Starting route search from %s to %s (simple mode: %s).",
            start,
            goal,
            not self._strict_goal_handler,
        )

    @property
    def dead_ends(self) -> DeadEndRegistry:
        """Registry consulted by this search."""
        return self._dead_ends

    def __iter__(self) -> RouteSearch:
        return self

    def __next__(self) -> RoutePath:
        while self._frontier and not self._done:
            if (
                self._max_iterations is not None
                and self.iterations >= self._max_iterations
            ):
                logger.warning(
                    "Route search stopped after %d iterations.", self.iterations
                )
                break
            self.iterations += 1
            current = heapq.heappop(self._frontier)

            if self._closed_before(current.node_index, current.visited_border):
                continue
            if self._dead_ends.is_dead_end(current.path):
                logger.debug("Pruned dead end: %s", render_formats(current.path))
                continue

            if current.node_index == self._goal_index:
                if self._accept(current.path):
                    self.paths_found += 1
                    logger.info(
                        "Found route at iteration %d with cost %.4g: %s",
                        self.iterations,
                        current.cost,
                        render_path(current.path),
                    )
                    self.last_cost = current.cost
                    return current.path
                continue

            self._close(current.node_index)
            self._expand(current)

            if self.iterations % PROGRESS_INTERVAL == 0:
                logger.debug(
                    "Still searching... iterations: %d, routes found: %d, queue: %d",
                    self.iterations,
                    self.paths_found,
                    len(self._frontier),
                )

        self._finish()
        raise StopIteration

    def with_costs(self) -> _CostedRoutes:
        """Iterate ``(cost, path)`` pairs instead of bare paths."""
        return _CostedRoutes(self)

    def _push(
        self, node_index: int, cost: float, path: RoutePath, visited_border: int
    ) -> None:
        heapq.heappush(
            self._frontier,
            _FrontierEntry(
                cost=cost,
                sequence=next(self._sequence),
                node_index=node_index,
                path=path,
                visited_border=visited_border,
            ),
        )

    def _closed_before(self, node_index: int, border: int) -> bool:
        closed_at = self._closed_at.get(node_index)
        return closed_at is not None and closed_at < border

    def _close(self, node_index: int) -> None:
        self._closed_at.setdefault(node_index, self._closed_count)
        self._closed_count += 1

    def _expand(self, current: _FrontierEntry) -> None:
        border = self._closed_count
        for edge in self._graph.outgoing(current.node_index):
            if self._closed_before(edge.target.index, current.visited_border):
                continue
            if not edge.resolved:
                continue
            step = PathStep(handler=edge.handler, format=edge.target.format)
            self._push(
                edge.target.index,
                current.cost + edge.cost,
                current.path + (step,),
                visited_border=border,
            )

    def _accept(self, path: RoutePath) -> bool:
        for chain in self._graph.costs.degenerate_chains:
            if contains_category_chain(path, chain):
                logger.info(
                    "Skipping route %s: %s conversion loses all meaningful content.",
                    render_formats(path),
                    " -> ".join(chain),
                )
                return False
        if not self._strict_goal_handler or self._goal.handler is None:
            return True
        return path[-1].handler == self._goal.handler

    def _finish(self) -> None:
        if self._done:
            return
        self._done = True
        self._frontier.clear()
        logger.info(
            "Route search completed. Iterations: %d, routes found: %d",
            self.iterations,
            self.paths_found,
        )


class _CostedRoutes:
    """Adapter yielding ``(cost, path)`` pairs from a ``RouteSearch``."""

    def __init__(self, search: RouteSearch) -> None:
        self._search = search

    def __iter__(self) -> _CostedRoutes:
        return self

    def __next__(self) -> tuple[float, RoutePath]:
        path = next(self._search)
        return self._search.last_cost, path


def search_paths(
    graph: RouteGraph,
    start: PathStep,
    goal: PathStep,
    *,
    simple_mode: bool = True,
    dead_ends: DeadEndRegistry | None = None,
    max_iterations: int | None = None,
) -> RouteSearch:
    """Create a lazy route search from ``start`` to ``goal``.

    Returns an iterator; no work happens until the first ``next()``. An
    unknown start or goal MIME type yields an empty iterator.
    """
    return RouteSearch(
        graph,
        start,
        goal,
        simple_mode=simple_mode,
        dead_ends=dead_ends,
        max_iterations=max_iterations,
    )
