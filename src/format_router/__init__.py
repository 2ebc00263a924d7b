"""Top-level API for multi-hop file format conversion routing."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from format_router.types import Catalog

if TYPE_CHECKING:
    from format_router.routing.dead_ends import DeadEndRegistry
    from format_router.routing.graph import RouteGraph
    from format_router.routing.paths import PathStep
    from format_router.routing.search import RouteSearch
    from format_router.schemas import RoutingCostConfig

__version__ = "0.1.0"


def build_graph(
    catalog: Catalog,
    *,
    costs: RoutingCostConfig | None = None,
    handler_names: Iterable[str] | None = None,
) -> RouteGraph:
    """Build a route graph from a handler capability catalog.

    Parameters
    ----------
    catalog : Mapping[str, Sequence[FileFormat]]
        Ordered handler name to formats mapping.
    costs : RoutingCostConfig, optional
        Cost model parameters.
    handler_names : Iterable[str], optional
        Handler names that can be resolved at conversion time.

    Returns
    -------
    RouteGraph
        Weighted multigraph over MIME types.
    """
    from .routing.graph import build_graph as _impl

    return _impl(
        catalog,
        costs=costs,
        handler_names=None if handler_names is None else frozenset(handler_names),
    )


def search_paths(
    graph: RouteGraph,
    start: PathStep,
    goal: PathStep,
    *,
    simple_mode: bool = True,
    dead_ends: DeadEndRegistry | None = None,
) -> RouteSearch:
    """Lazily enumerate routes from ``start`` to ``goal``, cheapest first.

    Parameters
    ----------
    graph : RouteGraph
        Graph returned by :func:`build_graph`.
    start, goal : PathStep
        Route endpoints.
    simple_mode : bool, default=True
        Accept any handler for the final hop.
    dead_ends : DeadEndRegistry, optional
        Registry of failing prefixes shared with the caller.

    Returns
    -------
    RouteSearch
        Iterator of routes (tuples of ``PathStep``).
    """
    from .routing.search import search_paths as _impl

    return _impl(graph, start, goal, simple_mode=simple_mode, dead_ends=dead_ends)


def convert_file(
    input_paths: Path | Sequence[Path],
    output_dir: Path,
    *,
    input_mime: str,
    output_mime: str,
    handler_modules: Iterable[str] | None = None,
    simple_mode: bool = True,
) -> list[Path]:
    """Convert files on disk through the cheapest working route.

    Returns
    -------
    list[Path]
        Paths of the written output files.
    """
    from .api import convert_file as _impl

    return _impl(
        input_paths,
        output_dir,
        input_mime=input_mime,
        output_mime=output_mime,
        handler_modules=handler_modules,
        simple_mode=simple_mode,
    )


__all__ = [
    "build_graph",
    "search_paths",
    "convert_file",
]
