"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass

from format_router.handlers.base import FileData
from format_router.types import RoutePath


@dataclass(frozen=True)
class ConversionResult:
    """Structured conversion outcome."""

    files: tuple[FileData, ...]
    path: RoutePath
    attempts: int = 1
