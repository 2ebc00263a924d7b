"""Route path steps and path-level helpers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from format_router.schemas import FileFormat
from format_router.types import RoutePath


@dataclass(frozen=True)
class PathStep:
    """One hop of a route: ``handler`` produced ``format``.

    Parameters
    ----------
    handler : str | None
        Name of the handler used to arrive at ``format``. ``None`` marks an
        origin step whose producing handler is irrelevant.
    format : FileFormat
        Format reached by this step.
    """

    handler: str | None
    format: FileFormat

    def __str__(self) -> str:
        return f"{self.handler or '*'}({self.format.mime})"


def render_path(path: Sequence[PathStep]) -> str:
    """Render a path as ``handler(mime) -> handler(mime)``."""
    return " -> ".join(str(step) for step in path)


def render_formats(path: Sequence[PathStep]) -> str:
    """Render only the format labels of a path, e.g. ``cur → ico``."""
    return " → ".join(step.format.label for step in path)


def contains_category_chain(path: RoutePath, chain: Sequence[str]) -> bool:
    """Check whether consecutive steps of ``path`` walk through ``chain``.

    A step matches a chain element when the element is among the step's
    categories, so multi-category formats match any of their tags.
    """
    width = len(chain)
    for start in range(len(path) - width + 1):
        window = path[start : start + width]
        if all(
            category in step.format.categories
            for category, step in zip(chain, window, strict=True)
        ):
            return True
    return False
