"""Unit tests for the lazy route search."""

from __future__ import annotations

import pytest

from format_router.routing.dead_ends import DeadEndRegistry
from format_router.routing.graph import build_graph
from format_router.routing.paths import PathStep
from format_router.routing.search import search_paths
from format_router.schemas import FileFormat, RoutingCostConfig

SRC = FileFormat(
    mime="text/x-src", format="src", category="text", lossless=True, from_=True, to=True
)
MID = FileFormat(
    mime="text/x-mid", format="mid", category="text", lossless=True, from_=True, to=True
)
DST = FileFormat(
    mime="text/x-dst", format="dst", category="text", lossless=True, from_=True, to=True
)


def _fmt(
    mime: str,
    category: str,
    *,
    lossless: bool = False,
    readable: bool = True,
    writable: bool = True,
) -> FileFormat:
    return FileFormat(
        mime=mime, category=category, lossless=lossless, from_=readable, to=writable
    )


def _start(fmt: FileFormat) -> PathStep:
    return PathStep(handler=None, format=fmt)


def _handlers(path: tuple[PathStep, ...]) -> list[str | None]:
    return [step.handler for step in path]


def _mimes(path: tuple[PathStep, ...]) -> list[str]:
    return [step.format.mime for step in path]


def test_two_hop_route_through_shared_format() -> None:
    """Find the only route across two handlers sharing a format."""
    a = _fmt("image/x-a", "image", lossless=True)
    b = _fmt("image/x-b", "image")
    c = _fmt("audio/x-c", "audio")
    graph = build_graph({"h1": [a, b], "h2": [b, c]})

    search = search_paths(graph, _start(a), PathStep(handler=None, format=c))
    routes = list(search.with_costs())

    assert len(routes) == 1
    cost, path = routes[0]
    assert _mimes(path) == ["image/x-a", "image/x-b", "audio/x-c"]
    assert _handlers(path) == [None, "h1", "h2"]
    assert cost == pytest.approx(1.4 + (1 + 2.0 + 0.05) * 1.4)


def test_start_equal_to_goal_yields_trivial_route() -> None:
    """Emit the one-step route when start and goal share a MIME type."""
    graph = build_graph({"h1": [SRC, DST]})
    routes = list(search_paths(graph, _start(SRC), _start(SRC)))
    assert routes == [(_start(SRC),)]


def test_unknown_endpoints_yield_nothing() -> None:
    """Return an empty iterator for MIME types absent from the graph."""
    graph = build_graph({"h1": [SRC, DST]})
    missing = FileFormat(mime="text/x-missing", from_=True, to=True)
    assert list(search_paths(graph, _start(missing), _start(DST))) == []
    assert list(search_paths(graph, _start(SRC), _start(missing))) == []


def test_routes_are_emitted_cheapest_first() -> None:
    """Emit every route in ascending cost order."""
    catalog = {
        "h1": [
            SRC.model_copy(update={"to": False}),
            MID,
            DST.model_copy(update={"from_": False}),
        ],
        "h2": [
            SRC.model_copy(update={"to": False}),
            DST.model_copy(update={"from_": False}),
        ],
    }
    graph = build_graph(catalog)

    routes = list(search_paths(graph, _start(SRC), _start(DST)).with_costs())

    costs = [cost for cost, _ in routes]
    assert costs == pytest.approx([1.0, 1.05, 2.0])
    assert [_handlers(path) for _, path in routes] == [
        [None, "h1"],
        [None, "h2"],
        [None, "h1", "h1"],
    ]


def test_route_cost_is_at_least_depth_per_hop() -> None:
    """Charge at least the depth cost for every hop."""
    catalog = {"h1": [SRC, MID, DST], "h2": [MID, DST]}
    config = RoutingCostConfig(depth_cost=2.0)
    graph = build_graph(catalog, costs=config)

    for cost, path in search_paths(graph, _start(SRC), _start(DST)).with_costs():
        assert cost >= config.depth_cost * (len(path) - 1)


def test_emitted_routes_never_revisit_a_format() -> None:
    """Keep every emitted route free of repeated MIME types."""
    catalog = {"h1": [SRC, MID, DST], "h2": [SRC, MID, DST], "h3": [MID, DST]}
    graph = build_graph(catalog)

    routes = list(search_paths(graph, _start(SRC), _start(DST)))

    assert routes
    for path in routes:
        mimes = _mimes(path)
        assert len(mimes) == len(set(mimes))
    assert len({tuple(path) for path in routes}) == len(routes)


def test_alternate_route_through_already_expanded_node() -> None:
    """Emit routes through a node reached earlier by a cheaper route."""
    src = SRC.model_copy(update={"to": False})
    dst = DST.model_copy(update={"from_": False})
    catalog = {"h1": [src, MID], "h2": [src, MID], "h3": [MID, dst]}
    graph = build_graph(catalog)

    routes = list(search_paths(graph, _start(SRC), _start(DST)))

    assert [_handlers(path) for path in routes] == [
        [None, "h1", "h3"],
        [None, "h2", "h3"],
    ]


def test_dead_end_prunes_queued_routes_immediately() -> None:
    """Skip routes matching a prefix recorded between two pulls."""
    catalog = {"h1": [SRC, DST], "h2": [SRC, DST]}
    graph = build_graph(catalog)
    dead_ends = DeadEndRegistry()
    search = search_paths(graph, _start(SRC), _start(DST), dead_ends=dead_ends)

    first = next(search)
    assert _handlers(first) == [None, "h1"]

    dead_ends.record((_start(SRC), PathStep(handler="h2", format=DST)))
    assert list(search) == []


def test_without_dead_end_the_second_route_is_emitted() -> None:
    """Emit the parallel route when nothing was recorded."""
    graph = build_graph({"h1": [SRC, DST], "h2": [SRC, DST]})
    search = search_paths(graph, _start(SRC), _start(DST))
    assert [_handlers(path) for path in search] == [[None, "h1"], [None, "h2"]]


def test_dead_end_prunes_whole_subtree() -> None:
    """Skip every route extending a failing prefix."""
    catalog = {"h1": [SRC, MID], "h2": [MID, DST], "h3": [SRC, DST]}
    graph = build_graph(catalog)
    dead_ends = DeadEndRegistry()
    dead_ends.record((_start(SRC), PathStep(handler="h1", format=MID)))

    routes = list(search_paths(graph, _start(SRC), _start(DST), dead_ends=dead_ends))

    assert [_handlers(path) for path in routes] == [[None, "h3"]]


def test_simple_mode_accepts_any_final_handler() -> None:
    """Accept the cheapest route regardless of the goal handler."""
    graph = build_graph({"h1": [SRC, DST], "h2": [SRC, DST]})
    goal = PathStep(handler="h2", format=DST)
    first = next(search_paths(graph, _start(SRC), goal, simple_mode=True))
    assert first[-1].handler == "h1"


def test_advanced_mode_requires_goal_handler() -> None:
    """Only accept routes whose last hop uses the goal handler."""
    graph = build_graph({"h1": [SRC, DST], "h2": [SRC, DST]})
    goal = PathStep(handler="h2", format=DST)
    routes = list(search_paths(graph, _start(SRC), goal, simple_mode=False))
    assert [_handlers(path) for path in routes] == [[None, "h2"]]


def test_advanced_mode_without_goal_handler_accepts_any() -> None:
    """Treat a goal without handler as unrestricted in advanced mode."""
    graph = build_graph({"h1": [SRC, DST], "h2": [SRC, DST]})
    routes = list(search_paths(graph, _start(SRC), _start(DST), simple_mode=False))
    assert len(routes) == 2


def test_degenerate_category_chain_is_rejected() -> None:
    """Reject image to video to audio routes."""
    image = _fmt("image/x-i", "image", readable=True, writable=False)
    video = _fmt("video/x-v", "video")
    audio = _fmt("audio/x-au", "audio", readable=False, writable=True)
    graph = build_graph({"h1": [image, video], "h2": [video, audio]})

    assert list(search_paths(graph, _start(image), _start(audio))) == []
    assert len(list(search_paths(graph, _start(image), _start(video)))) == 1
    assert len(list(search_paths(graph, _start(video), _start(audio)))) == 1


def test_degenerate_chains_are_configurable() -> None:
    """Allow the chain when the configuration lists no degenerate chains."""
    image = _fmt("image/x-i", "image", readable=True, writable=False)
    video = _fmt("video/x-v", "video")
    audio = _fmt("audio/x-au", "audio", readable=False, writable=True)
    graph = build_graph(
        {"h1": [image, video], "h2": [video, audio]},
        costs=RoutingCostConfig(degenerate_chains=()),
    )
    assert len(list(search_paths(graph, _start(image), _start(audio)))) == 1


def test_unresolved_handler_edges_are_not_traversed() -> None:
    """Ignore edges of handlers the registry cannot resolve."""
    graph = build_graph({"h1": [SRC, DST], "ghost": [SRC, DST]}, handler_names={"h1"})
    routes = list(search_paths(graph, _start(SRC), _start(DST)))
    assert [_handlers(path) for path in routes] == [[None, "h1"]]


def test_max_iterations_stops_the_search() -> None:
    """Stop after the configured number of dequeues."""
    graph = build_graph({"h1": [SRC, DST]})
    search = search_paths(graph, _start(SRC), _start(DST), max_iterations=1)
    assert list(search) == []
    assert search.iterations == 1


def test_search_is_lazy_and_tracks_progress() -> None:
    """Do no work before the first pull and count found routes."""
    graph = build_graph({"h1": [SRC, DST], "h2": [SRC, DST]})
    search = search_paths(graph, _start(SRC), _start(DST))
    assert search.iterations == 0

    next(search)
    assert search.paths_found == 1
    assert search.last_cost == pytest.approx(1.0)

    second = next(search)
    assert _handlers(second) == [None, "h2"]
    assert search.last_cost == pytest.approx(1.05)

    with pytest.raises(StopIteration):
        next(search)
    assert search.paths_found == 2
