"""Shared type aliases for routing modules."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from format_router.routing.paths import PathStep
    from format_router.schemas import FileFormat

Category: TypeAlias = str
Catalog: TypeAlias = Mapping[str, Sequence["FileFormat"]]
RoutePath: TypeAlias = tuple["PathStep", ...]
