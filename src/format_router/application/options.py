"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConversionOptions:
    """Route-search options for one conversion attempt.

    ``simple_mode`` accepts any handler for the final hop. ``max_attempts``
    bounds how many candidate routes are executed and ``max_iterations``
    bounds the search itself; ``None`` means unbounded.
    """

    simple_mode: bool = True
    max_attempts: int | None = None
    max_iterations: int | None = None
