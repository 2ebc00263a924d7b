"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from format_router.application.options import ConversionOptions
from format_router.application.results import ConversionResult
from format_router.handlers.base import FileData
from format_router.handlers.registry import HandlerRegistry
from format_router.routing.paths import PathStep
from format_router.schemas import RoutingCostConfig


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
    """Convert files along the cheapest working route via lazy use-case import."""
    from format_router.application.use_cases import convert_by_traversing as _impl

    return await _impl(
        files=files,
        start=start,
        goal=goal,
        options=options,
        registry=registry,
        handler_modules=handler_modules,
        costs=costs,
    )


__all__ = [
    "ConversionOptions",
    "ConversionResult",
    "convert_by_traversing",
]
