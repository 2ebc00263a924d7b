"""Conversion-route engine: graph builder, route search, dead-end registry."""

from .dead_ends import DeadEndRegistry
from .graph import EdgeEndpoint, GraphEdge, GraphNode, RouteGraph, build_graph
from .paths import PathStep, render_formats, render_path
from .search import RouteSearch, search_paths

__all__ = [
    "DeadEndRegistry",
    "EdgeEndpoint",
    "GraphEdge",
    "GraphNode",
    "PathStep",
    "RouteGraph",
    "RouteSearch",
    "build_graph",
    "render_formats",
    "render_path",
    "search_paths",
]
