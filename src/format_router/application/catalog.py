"""Capability cache mapping handler names to their declared formats."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from format_router.errors import CatalogError, ConversionError
from format_router.handlers.registry import HandlerRegistry
from format_router.routing.graph import RouteGraph, build_graph
from format_router.routing.paths import PathStep
from format_router.schemas import CatalogDocument, FileFormat, RoutingCostConfig
from format_router.types import Catalog

logger = logging.getLogger(__name__)


class CapabilityCache:
    """Explicit cache of handler capabilities.

    The cache is owned by the caller and passed to whatever builds graphs or
    runs conversions; entries are filled lazily by :meth:`refresh` and can be
    dropped with :meth:`invalidate` before rebuilding the graph.

    Parameters
    ----------
    registry : HandlerRegistry
        Handlers whose capabilities are cached. Their order is the catalog
        order.
    entries : Mapping[str, Sequence[FileFormat]] | None, optional
        Pre-populated entries, e.g. from a catalog document.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        entries: Mapping[str, Sequence[FileFormat]] | None = None,
    ) -> None:
        self._registry = registry
        self._formats: dict[str, tuple[FileFormat, ...]] = {}
        for name, formats in (entries or {}).items():
            self.set(name, formats)

    @classmethod
    def from_document(
        cls, registry: HandlerRegistry, payload: Mapping[str, object]
    ) -> CapabilityCache:
        """Create a cache pre-populated from a serialized catalog document.

        Raises
        ------
        CatalogError
            If the document does not validate.
        """
        try:
            document = CatalogDocument.model_validate(payload)
        except ValidationError as exc:
            raise CatalogError(f"Invalid capability catalog: {exc}") from exc
        return cls(registry, document.to_catalog())

    @property
    def registry(self) -> HandlerRegistry:
        """Registry backing this cache."""
        return self._registry

    async def refresh(self) -> Catalog:
        """Initialise every uncached handler and record its formats.

        Handlers that fail to initialise or declare no formats are left out
        of the catalog with a warning.
        """
        for handler in self._registry.handlers():
            if handler.name in self._formats:
                continue
            logger.info("Cache miss for formats of handler '%s'.", handler.name)
            try:
                await handler.init()
            except Exception as exc:
                logger.warning(
                    "Handler '%s' failed to initialise: %s", handler.name, exc
                )
                continue
            if not handler.supported_formats:
                logger.warning("Handler '%s' doesn't support any formats.", handler.name)
                continue
            self.set(handler.name, handler.supported_formats)
        return self.catalog()

    def get(self, name: str) -> tuple[FileFormat, ...] | None:
        """Return cached formats for ``name``."""
        return self._formats.get(name)

    def set(self, name: str, formats: Sequence[FileFormat]) -> None:
        """Store the formats declared by handler ``name``."""
        self._formats[name] = tuple(formats)

    def invalidate(self, name: str | None = None) -> None:
        """Drop one cached entry, or every entry when ``name`` is ``None``."""
        if name is None:
            self._formats.clear()
            return
        self._formats.pop(name, None)

    def catalog(self) -> Catalog:
        """Return cached capabilities, registered handlers first in rank order."""
        ordered = {
            name: self._formats[name]
            for name in self._registry.names()
            if name in self._formats
        }
        for name, formats in self._formats.items():
            ordered.setdefault(name, formats)
        return ordered

    def build_graph(self, costs: RoutingCostConfig | None = None) -> RouteGraph:
        """Build a route graph from the current cache contents."""
        return build_graph(
            self.catalog(), costs=costs, handler_names=self._registry.names()
        )

    def find_endpoint(
        self,
        mime: str,
        *,
        readable: bool,
        handler: str | None = None,
        format_name: str | None = None,
    ) -> PathStep:
        """Resolve a MIME type into a route endpoint step.

        Parameters
        ----------
        mime : str
            Requested MIME type.
        readable : bool
            ``True`` for a route start (format must be readable), ``False``
            for a route goal (format must be writable).
        handler : str | None, optional
            Restrict the lookup to one handler; the step keeps this handler.
        format_name : str | None, optional
            Prefer formats with this short name when several share the MIME.

        Returns
        -------
        PathStep
            The matching declared format, or a bare format for ``mime`` when
            nothing declares it (searches from it yield no routes).
        """
        wanted = mime.strip().lower()
        if not wanted:
            raise CatalogError("MIME type cannot be blank.")
        candidates = [
            (name, fmt)
            for name, formats in self.catalog().items()
            if handler is None or name == handler
            for fmt in formats
            if fmt.mime == wanted and (fmt.from_ if readable else fmt.to)
        ]
        if format_name:
            named = [item for item in candidates if item[1].format == format_name]
            candidates = named or candidates
        if candidates:
            name, fmt = candidates[0]
            return PathStep(handler=handler or name, format=fmt)
        fallback = FileFormat(
            mime=wanted, format=format_name or "", from_=readable, to=not readable
        )
        return PathStep(handler=handler, format=fallback)

    def find_input_format(self, handler: str, wanted: FileFormat) -> FileFormat:
        """Find the readable format of ``handler`` matching ``wanted``.

        Formats match on MIME type and short format name; a MIME-only match is
        used when no format name matches.

        Raises
        ------
        ConversionError
            If the handler cannot read the MIME type at all.
        """
        readable = [fmt for fmt in self._formats.get(handler, ()) if fmt.from_]
        for fmt in readable:
            if fmt.mime == wanted.mime and fmt.format == wanted.format:
                return fmt
        for fmt in readable:
            if fmt.mime == wanted.mime:
                return fmt
        raise ConversionError(f"Handler '{handler}' cannot read {wanted.mime}.")
