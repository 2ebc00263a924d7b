"""Handler protocol for pluggable format conversion tools."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from format_router.schemas import FileFormat


@dataclass(frozen=True)
class FileData:
    """In-memory file passed between conversion steps."""

    name: str
    data: bytes


def replace_extension(name: str, extension: str) -> str:
    """Swap the final extension of ``name`` for ``extension``."""
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return f"{stem}.{extension}" if extension else stem


@runtime_checkable
class FormatHandler(Protocol):
    """Protocol implemented by conversion handlers."""

    name: str
    ready: bool
    supported_formats: list[FileFormat] | None

    async def init(self) -> None:
        """Prepare the handler and populate ``supported_formats``.

        Implementations set ``ready`` to ``True`` once conversions can run.
        """

    async def do_convert(
        self,
        input_files: Sequence[FileData],
        input_format: FileFormat,
        output_format: FileFormat,
    ) -> list[FileData]:
        """Convert ``input_files`` from ``input_format`` to ``output_format``.

        Parameters
        ----------
        input_files : Sequence[FileData]
            Files in ``input_format``.
        input_format : FileFormat
            One of this handler's readable formats.
        output_format : FileFormat
            One of this handler's writable formats.

        Returns
        -------
        list[FileData]
            Converted files.
        """
