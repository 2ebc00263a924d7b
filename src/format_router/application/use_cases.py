"""Application use-cases orchestrating route search and conversion."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from format_router.application.catalog import CapabilityCache
from format_router.application.options import ConversionOptions
from format_router.application.results import ConversionResult
from format_router.errors import ConversionError, RouteNotFoundError
from format_router.handlers.base import FileData, FormatHandler
from format_router.handlers.registry import HandlerRegistry, create_default_registry
from format_router.routing.dead_ends import DeadEndRegistry
from format_router.routing.graph import RouteGraph
from format_router.routing.paths import PathStep, render_formats
from format_router.routing.search import search_paths
from format_router.schemas import RoutingCostConfig
from format_router.types import RoutePath

logger = logging.getLogger(__name__)


class RouteConverter:
    """Try candidate routes until one converts the input files.

    Each failed hop is recorded in :attr:`dead_ends`, which the running search
    consults before emitting its next route.

    Parameters
    ----------
    registry : HandlerRegistry
        Handlers that execute route hops.
    cache : CapabilityCache
        Capability cache the graph is built from.
    graph : RouteGraph
        Route graph built from ``cache``.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        cache: CapabilityCache,
        graph: RouteGraph,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._graph = graph
        self.dead_ends = DeadEndRegistry()

    @classmethod
    async def create(
        cls,
        registry: HandlerRegistry,
        *,
        cache: CapabilityCache | None = None,
        costs: RoutingCostConfig | None = None,
    ) -> RouteConverter:
        """Refresh the capability cache and build the graph for ``registry``."""
        cache = cache or CapabilityCache(registry)
        await cache.refresh()
        return cls(registry, cache, cache.build_graph(costs))

    @property
    def graph(self) -> RouteGraph:
        """Current route graph."""
        return self._graph

    def rebuild_graph(self, costs: RoutingCostConfig | None = None) -> RouteGraph:
        """Rebuild the graph after the capability cache changed."""
        self._graph = self._cache.build_graph(costs or self._graph.costs)
        return self._graph

    async def convert(
        self,
        files: Sequence[FileData],
        start: PathStep,
        goal: PathStep,
        options: ConversionOptions | None = None,
    ) -> ConversionResult | None:
        """Convert ``files`` from ``start`` to ``goal`` along the cheapest working route.

        Returns
        -------
        ConversionResult | None
            Converted files and the route used, or ``None`` once every
            candidate route has failed.
        """
        options = options or ConversionOptions()
        self.dead_ends.clear()
        attempts = 0
        routes = search_paths(
            self._graph,
            start,
            goal,
            simple_mode=options.simple_mode,
            dead_ends=self.dead_ends,
            max_iterations=options.max_iterations,
        )
        for path in routes:
            # use the exact requested output format when its handler is last
            if path[-1].handler == goal.handler:
                path = path[:-1] + (goal,)

            dead_end = self.dead_ends.match(path)
            if dead_end is not None:
                logger.warning(
                    "Skipping %s due to dead end near %s.",
                    render_formats(path),
                    render_formats(dead_end[-2:]),
                )
                continue

            if options.max_attempts is not None and attempts >= options.max_attempts:
                logger.warning("Giving up after %d attempted routes.", attempts)
                break
            attempts += 1

            logger.info("Trying %s...", render_formats(path))
            converted = await self.attempt_route(files, path)
            if converted is not None:
                return ConversionResult(
                    files=tuple(converted), path=path, attempts=attempts
                )
        return None

    async def attempt_route(
        self, files: Sequence[FileData], path: RoutePath
    ) -> list[FileData] | None:
        """Run every hop of ``path``; record the failing prefix on error."""
        current = list(files)
        for i in range(len(path) - 1):
            source, target = path[i], path[i + 1]
            try:
                if target.handler is None:
                    raise ConversionError("Route step has no handler.")
                handler = self._registry.get(target.handler)
                await self._ensure_ready(handler)
                input_format = self._cache.find_input_format(handler.name, source.format)
                current = await handler.do_convert(current, input_format, target.format)
                if not current or any(not item.data for item in current):
                    raise ConversionError("Output is empty.")
            except Exception as exc:
                logger.warning(
                    "%s failed %s -> %s: %s",
                    target.handler,
                    source.format.label,
                    target.format.label,
                    exc,
                )
                self.dead_ends.record(path[: i + 2])
                return None
        return current

    async def _ensure_ready(self, handler: FormatHandler) -> None:
        if handler.ready:
            return
        await handler.init()
        if not handler.ready:
            raise ConversionError(f"Handler '{handler.name}' not ready after init.")
        if handler.supported_formats:
            self._cache.set(handler.name, handler.supported_formats)
        if self._cache.get(handler.name) is None:
            raise ConversionError(f"Handler '{handler.name}' doesn't support any formats.")


async def convert_by_traversing(
    *,
    files: Sequence[FileData],
    start: PathStep,
    goal: PathStep,
    options: ConversionOptions | None = None,
    registry: HandlerRegistry | None = None,
    handler_modules: Iterable[str] | None = None,
    costs: RoutingCostConfig | None = None,
) -> ConversionResult:
    """Use-case: convert files through the cheapest route that works.

    Raises
    ------
    RouteNotFoundError
        If no candidate route converts the files.
    """
    if registry is None:
        registry = create_default_registry(extra_modules=handler_modules)
    converter = await RouteConverter.create(registry, costs=costs)
    result = await converter.convert(files, start, goal, options)
    if result is None:
        raise RouteNotFoundError(
            f"No working conversion route from {start.format.mime} to {goal.format.mime}."
        )
    return result
