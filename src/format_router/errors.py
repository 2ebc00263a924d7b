"""Exception hierarchy for format routing and conversion."""

from __future__ import annotations


class FormatRouterError(Exception):
    """Base error for all format-router failures."""

    exit_code = 1


class CatalogError(FormatRouterError):
    """Capability catalog is malformed (caller contract violation)."""

    exit_code = 2


class HandlerError(FormatRouterError):
    """Handler registration, lookup, or plugin loading failed."""

    exit_code = 2


class ConversionError(FormatRouterError):
    """A conversion step failed while executing a route."""

    exit_code = 1


class RouteNotFoundError(ConversionError):
    """Every candidate route was exhausted without a successful conversion."""

    exit_code = 3
