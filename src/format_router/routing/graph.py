"""Route graph construction from a handler capability catalog."""

from __future__ import annotations

import logging
import time
from collections.abc import Collection
from dataclasses import dataclass, field

from format_router.errors import CatalogError
from format_router.routing.costs import edge_cost
from format_router.schemas import FileFormat, RoutingCostConfig
from format_router.types import Catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphNode:
    """One graph node per distinct MIME type."""

    mime: str
    edges: tuple[int, ...] = ()


@dataclass(frozen=True)
class EdgeEndpoint:
    """Format at one end of an edge and the node it belongs to."""

    format: FileFormat
    index: int


@dataclass(frozen=True)
class GraphEdge:
    """Directed conversion ``source -> target`` performed by ``handler``.

    ``resolved`` is fixed at build time: ``False`` when the handler name was
    not found in the handler registry supplied to the builder.
    """

    source: EdgeEndpoint
    target: EdgeEndpoint
    handler: str
    cost: float
    resolved: bool = True


@dataclass(frozen=True)
class RouteGraph:
    """Immutable weighted multigraph over file formats."""

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    costs: RoutingCostConfig = field(default_factory=RoutingCostConfig)
    _index: dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self._index:
            self._index.update({node.mime: i for i, node in enumerate(self.nodes)})

    def node_index(self, mime: str) -> int | None:
        """Return the node index for ``mime`` or ``None`` if absent."""
        return self._index.get(mime.strip().lower())

    def outgoing(self, node_index: int) -> list[GraphEdge]:
        """Return outgoing edges of a node in build order."""
        return [self.edges[i] for i in self.nodes[node_index].edges]

    def describe(self) -> str:
        """Render a node and edge listing for debugging."""
        lines = ["Nodes:"]
        lines.extend(f"{i}: {node.mime}" for i, node in enumerate(self.nodes))
        lines.append("Edges:")
        lines.extend(
            f"{i}: {edge.source.format.mime} -> {edge.target.format.mime} "
            f"(handler: {edge.handler}, cost: {edge.cost:.4g})"
            + ("" if edge.resolved else " [unresolved]")
            for i, edge in enumerate(self.edges)
        )
        return "\n".join(lines)


def build_graph(
    catalog: Catalog,
    *,
    costs: RoutingCostConfig | None = None,
    handler_names: Collection[str] | None = None,
) -> RouteGraph:
    """Build the route graph for a capability catalog.

    Parameters
    ----------
    catalog : Mapping[str, Sequence[FileFormat]]
        Ordered handler name to formats mapping. Iteration order is the
        handler rank used by the priority cost.
    costs : RoutingCostConfig | None, optional
        Cost model parameters. Defaults to ``RoutingCostConfig()``.
    handler_names : Collection[str] | None, optional
        Names the handler registry can resolve. Edges of other handlers are
        kept but marked unresolved. ``None`` treats every handler as resolved.

    Returns
    -------
    RouteGraph
        Graph with one node per MIME type and one edge per
        (handler, readable format, writable format) triple.

    Raises
    ------
    CatalogError
        If a format has no MIME identifier.
    """
    config = costs or RoutingCostConfig()
    started = time.perf_counter()

    mimes: list[str] = []
    index_of: dict[str, int] = {}
    outgoing: list[list[int]] = []
    edges: list[GraphEdge] = []

    for rank, (handler, formats) in enumerate(catalog.items()):
        resolved = handler_names is None or handler in handler_names
        readable: list[EdgeEndpoint] = []
        writable: list[EdgeEndpoint] = []
        for fmt in formats:
            mime = getattr(fmt, "mime", None)
            if not mime:
                raise CatalogError(
                    f"Handler '{handler}' declares a format without a MIME type."
                )
            index = index_of.get(mime)
            if index is None:
                index = len(mimes)
                index_of[mime] = index
                mimes.append(mime)
                outgoing.append([])
            if fmt.from_:
                readable.append(EdgeEndpoint(format=fmt, index=index))
            if fmt.to:
                writable.append(EdgeEndpoint(format=fmt, index=index))

        for source in readable:
            for target in writable:
                if source.index == target.index:
                    continue
                edges.append(
                    GraphEdge(
                        source=source,
                        target=target,
                        handler=handler,
                        cost=edge_cost(source.format, target.format, rank, config),
                        resolved=resolved,
                    )
                )
                outgoing[source.index].append(len(edges) - 1)

    nodes = tuple(
        GraphNode(mime=mime, edges=tuple(outgoing[i])) for i, mime in enumerate(mimes)
    )
    graph = RouteGraph(nodes=nodes, edges=tuple(edges), costs=config)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Route graph built in %.2f ms with %d nodes and %d edges.",
        elapsed_ms,
        len(nodes),
        len(edges),
    )
    return graph
