"""Public file-based conversion API (delegates to application use-cases)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from format_router.application.catalog import CapabilityCache
from format_router.application.options import ConversionOptions
from format_router.application.use_cases import RouteConverter
from format_router.errors import ConversionError, RouteNotFoundError
from format_router.handlers.base import FileData
from format_router.handlers.registry import HandlerRegistry, create_default_registry
from format_router.routing.search import search_paths
from format_router.schemas import RoutingCostConfig
from format_router.types import RoutePath

logger = logging.getLogger(__name__)


async def _load_converter(
    registry: Optional[HandlerRegistry],
    handler_modules: Optional[Iterable[str]],
    costs: Optional[RoutingCostConfig],
) -> tuple[RouteConverter, CapabilityCache]:
    if registry is None:
        registry = create_default_registry(extra_modules=handler_modules)
    cache = CapabilityCache(registry)
    converter = await RouteConverter.create(registry, cache=cache, costs=costs)
    return converter, cache


def list_routes(
    input_mime: str,
    output_mime: str,
    *,
    limit: int = 5,
    simple_mode: bool = True,
    input_handler: Optional[str] = None,
    output_handler: Optional[str] = None,
    registry: Optional[HandlerRegistry] = None,
    handler_modules: Optional[Iterable[str]] = None,
    costs: Optional[RoutingCostConfig] = None,
) -> list[tuple[float, RoutePath]]:
    """Return up to ``limit`` candidate routes with their costs, cheapest first."""

    async def _run() -> list[tuple[float, RoutePath]]:
        converter, cache = await _load_converter(registry, handler_modules, costs)
        start = cache.find_endpoint(input_mime, readable=True, handler=input_handler)
        goal = cache.find_endpoint(output_mime, readable=False, handler=output_handler)
        search = search_paths(converter.graph, start, goal, simple_mode=simple_mode)
        routes: list[tuple[float, RoutePath]] = []
        for cost, path in search.with_costs():
            routes.append((cost, path))
            if len(routes) >= limit:
                break
        return routes

    return asyncio.run(_run())


def convert_file(
    input_paths: Path | Sequence[Path],
    output_dir: Path,
    *,
    input_mime: str,
    output_mime: str,
    input_format: Optional[str] = None,
    output_format: Optional[str] = None,
    output_handler: Optional[str] = None,
    simple_mode: bool = True,
    max_attempts: Optional[int] = None,
    registry: Optional[HandlerRegistry] = None,
    handler_modules: Optional[Iterable[str]] = None,
    costs: Optional[RoutingCostConfig] = None,
) -> list[Path]:
    """Convert files on disk and write the results into ``output_dir``.

    Raises
    ------
    ConversionError
        If an input file cannot be read.
    RouteNotFoundError
        If no route converts the files.
    """
    paths = [input_paths] if isinstance(input_paths, Path) else list(input_paths)
    try:
        files = [FileData(name=path.name, data=path.read_bytes()) for path in sorted(paths)]
    except OSError as exc:
        raise ConversionError(f"Unable to read input file: {exc}") from exc

    async def _run() -> tuple[FileData, ...]:
        converter, cache = await _load_converter(registry, handler_modules, costs)
        start = cache.find_endpoint(input_mime, readable=True, format_name=input_format)
        goal = cache.find_endpoint(
            output_mime,
            readable=False,
            handler=output_handler,
            format_name=output_format,
        )
        if start.format.mime == goal.format.mime and start.format.format == goal.format.format:
            logger.info("Input and output formats are identical; copying input.")
            return tuple(files)
        result = await converter.convert(
            files,
            start,
            goal,
            ConversionOptions(simple_mode=simple_mode, max_attempts=max_attempts),
        )
        if result is None:
            raise RouteNotFoundError(
                f"No working conversion route from {input_mime} to {output_mime}."
            )
        return result.files

    outputs = asyncio.run(_run())
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for item in outputs:
        target = output_dir / Path(item.name).name
        target.write_bytes(item.data)
        written.append(target)
    return written
