"""Handler interfaces and registry for format conversion tools."""

from .base import FileData, FormatHandler
from .registry import HandlerRegistry, create_default_registry

__all__ = ["FileData", "FormatHandler", "HandlerRegistry", "create_default_registry"]
