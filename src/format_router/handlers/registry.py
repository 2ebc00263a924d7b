"""Handler registry and plugin discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
import logging
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from format_router.errors import HandlerError
from format_router.handlers.base import FormatHandler
from format_router.handlers.builtins import CursorIconHandler

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Ordered registry of conversion handlers.

    Registration order is the handler rank used by the route cost model, so
    handlers registered first are preferred.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, FormatHandler] = {}

    def register(self, handler: FormatHandler) -> None:
        """Register handler instance by unique name.

        Parameters
        ----------
        handler : FormatHandler
            Handler instance to register.

        Raises
        ------
        HandlerError
            If the handler has no valid name or the name is already taken.
        """
        name = getattr(handler, "name", "").strip()
        if not name:
            raise HandlerError("Handler must define a non-empty 'name'.")
        if name in self._handlers:
            raise HandlerError(f"Handler '{name}' is already registered.")
        self._handlers[name] = handler

    def names(self) -> list[str]:
        """Return handler names in registration order."""
        return list(self._handlers)

    def handlers(self) -> list[FormatHandler]:
        """Return handler instances in registration order."""
        return list(self._handlers.values())

    def get(self, name: str) -> FormatHandler:
        """Get handler by name.

        Raises
        ------
        HandlerError
            If handler name is not registered.
        """
        try:
            return self._handlers[name]
        except KeyError as exc:
            raise HandlerError(
                f"Unknown handler '{name}'. Available handlers: {', '.join(self.names())}"
            ) from exc

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def load_module(self, module_or_path: str) -> None:
        """Load handlers from module name or file path.

        .. warning::
            This method executes code from the specified module. Only load
            handlers from trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Parameters
    ----------
    module_or_path : str
        Python module path or local file path. Must be from a trusted source.

    Returns
    -------
    ModuleType
        Imported module object.

    Raises
    ------
    HandlerError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise HandlerError(f"Unable to load handler module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise HandlerError(
            f"Unable to import handler module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: HandlerRegistry) -> None:
    """Register handler definitions found in module."""
    if hasattr(module, "register_handlers"):
        module.register_handlers(registry)
        return

    handlers_obj = getattr(module, "HANDLERS", None)
    if handlers_obj is not None:
        for handler in handlers_obj:
            registry.register(handler)
        return

    handler_obj = getattr(module, "HANDLER", None)
    if handler_obj is not None:
        registry.register(handler_obj)
        return

    raise HandlerError(
        "Handler module must expose register_handlers(registry), HANDLERS, or HANDLER."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> HandlerRegistry:
    """Create registry with built-in handlers followed by plugin handlers.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional handler modules to load, in priority order.

    Returns
    -------
    HandlerRegistry
        Registry with built-in and external handlers.
    """
    registry = HandlerRegistry()
    registry.register(CursorIconHandler())
    for module in extra_modules or []:
        registry.load_module(module)
        logger.debug("Loaded handler module %s", module)
    return registry
