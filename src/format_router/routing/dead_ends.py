"""Registry of route prefixes known to fail in practice."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from format_router.routing.paths import PathStep, render_formats
from format_router.types import RoutePath

logger = logging.getLogger(__name__)


class DeadEndRegistry:
    """Append-only set of failing path prefixes for one conversion attempt.

    The registry is shared between a running search and its consumer: a
    prefix recorded by the consumer prunes every frontier entry the search
    dequeues afterwards, including entries queued before the prefix was known.
    """

    def __init__(self) -> None:
        self._prefixes: list[RoutePath] = []

    def record(self, prefix: Sequence[PathStep]) -> None:
        """Register ``prefix`` as a dead end.

        Parameters
        ----------
        prefix : Sequence[PathStep]
            Steps from the route origin up to and including the failing hop.
        """
        entry = tuple(prefix)
        if not entry:
            raise ValueError("Dead-end prefix must contain at least one step.")
        if entry in self._prefixes:
            return
        self._prefixes.append(entry)
        logger.debug("Recorded dead end: %s", render_formats(entry))

    def clear(self) -> None:
        """Forget every recorded prefix."""
        self._prefixes.clear()

    def is_dead_end(self, path: Sequence[PathStep]) -> bool:
        """Return ``True`` if ``path`` starts with a recorded prefix.

        Steps compare by handler name and format, never by cost. A path
        shorter than a prefix does not match that prefix.
        """
        return self.match(path) is not None

    def match(self, path: Sequence[PathStep]) -> RoutePath | None:
        """Return the first recorded prefix that ``path`` starts with."""
        for prefix in self._prefixes:
            if len(path) < len(prefix):
                continue
            if all(a == b for a, b in zip(prefix, path)):
                return prefix
        return None

    def __len__(self) -> int:
        return len(self._prefixes)

    def __iter__(self) -> Iterator[RoutePath]:
        return iter(tuple(self._prefixes))
