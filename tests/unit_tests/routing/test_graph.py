"""Unit tests for route graph construction."""

from __future__ import annotations

import types

import pytest

from format_router.errors import CatalogError
from format_router.routing.graph import build_graph
from format_router.schemas import FileFormat, RoutingCostConfig


def _fmt(
    mime: str,
    *,
    category: str = "image",
    lossless: bool = True,
    readable: bool = True,
    writable: bool = True,
    name: str = "",
) -> FileFormat:
    return FileFormat(
        mime=mime,
        format=name or mime.rsplit("/", 1)[-1],
        category=category,
        lossless=lossless,
        from_=readable,
        to=writable,
    )


def test_nodes_are_unique_per_mime_in_first_seen_order() -> None:
    """Create one node per MIME type across all handlers."""
    catalog = {
        "h1": [_fmt("image/png"), _fmt("image/jpeg")],
        "h2": [_fmt("image/jpeg"), _fmt("image/gif")],
    }
    graph = build_graph(catalog)
    assert [node.mime for node in graph.nodes] == ["image/png", "image/jpeg", "image/gif"]
    assert graph.node_index("IMAGE/GIF") == 2
    assert graph.node_index("image/webp") is None


def test_no_self_loops_for_repeated_mime() -> None:
    """Skip edges whose endpoints share a MIME type."""
    catalog = {
        "h1": [
            _fmt("image/png", name="png"),
            _fmt("image/png", name="apng"),
            _fmt("image/gif"),
        ]
    }
    graph = build_graph(catalog)
    assert graph.edges
    assert all(edge.source.index != edge.target.index for edge in graph.edges)
    # png and apng each reach gif, gif reaches both png entries
    assert len(graph.edges) == 4


def test_one_edge_per_handler_and_format_pair() -> None:
    """Keep parallel edges from different handlers."""
    catalog = {
        "h1": [_fmt("image/png"), _fmt("image/gif")],
        "h2": [_fmt("image/png"), _fmt("image/gif")],
    }
    graph = build_graph(catalog)
    png = graph.node_index("image/png")
    handlers = [edge.handler for edge in graph.outgoing(png)]
    assert handlers == ["h1", "h2"]


def test_edges_respect_read_and_write_flags() -> None:
    """Only connect readable sources to writable targets."""
    catalog = {
        "h1": [
            _fmt("image/x-in", readable=True, writable=False),
            _fmt("image/x-out", readable=False, writable=True),
        ]
    }
    graph = build_graph(catalog)
    assert len(graph.edges) == 1
    edge = graph.edges[0]
    assert edge.source.format.mime == "image/x-in"
    assert edge.target.format.mime == "image/x-out"
    assert graph.outgoing(graph.node_index("image/x-out")) == []


def test_edge_costs_follow_handler_rank() -> None:
    """Charge the priority cost according to handler order."""
    catalog = {
        "first": [_fmt("image/png"), _fmt("audio/wav", category="audio", lossless=False)],
        "second": [_fmt("image/png"), _fmt("audio/wav", category="audio", lossless=False)],
    }
    graph = build_graph(catalog)
    png = graph.node_index("image/png")
    first, second = graph.outgoing(png)
    assert first.cost == pytest.approx((1 + 2.0) * 1.4)
    assert second.cost == pytest.approx((1 + 2.0 + 0.05) * 1.4)


def test_cost_config_is_kept_on_graph() -> None:
    """Expose the cost configuration used to build the graph."""
    config = RoutingCostConfig(depth_cost=3.0)
    graph = build_graph({"h1": [_fmt("image/png"), _fmt("image/gif")]}, costs=config)
    assert graph.costs is config
    assert graph.edges[0].cost == pytest.approx(3.0)


def test_unknown_handler_edges_are_marked_unresolved() -> None:
    """Mark edges of handlers missing from the registry as unresolved."""
    catalog = {
        "known": [_fmt("image/png"), _fmt("image/gif")],
        "ghost": [_fmt("image/png"), _fmt("image/bmp")],
    }
    graph = build_graph(catalog, handler_names={"known"})
    resolved = {edge.handler: edge.resolved for edge in graph.edges}
    assert resolved == {"known": True, "ghost": False}
    assert "[unresolved]" in graph.describe()


def test_format_without_mime_is_rejected() -> None:
    """Raise CatalogError when a declared format has no MIME type."""
    broken = types.SimpleNamespace(mime="", from_=True, to=True)
    with pytest.raises(CatalogError, match="without a MIME type"):
        build_graph({"h1": [_fmt("image/png"), broken]})


def test_empty_catalog_builds_empty_graph() -> None:
    """Build an empty graph from an empty catalog."""
    graph = build_graph({})
    assert graph.nodes == ()
    assert graph.edges == ()


def test_describe_lists_nodes_and_edges() -> None:
    """Render nodes and edges with handler names."""
    graph = build_graph({"h1": [_fmt("image/png"), _fmt("image/gif")]})
    text = graph.describe()
    assert "0: image/png" in text
    assert "image/png -> image/gif (handler: h1" in text
