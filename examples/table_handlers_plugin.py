#!/usr/bin/env python3
"""Example plugin converting tabular data between JSON and CSV."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from format_router.errors import ConversionError
from format_router.handlers.base import FileData, replace_extension
from format_router.schemas import FileFormat


class TableHandler:
    """Convert a JSON array of objects to CSV and back.

    Loaded with ``format-router --handler-module examples/table_handlers_plugin.py``.
    """

    name = "table"

    def __init__(self) -> None:
        self.ready = False
        self.supported_formats: list[FileFormat] | None = None

    async def init(self) -> None:
        """Declare JSON and CSV as lossless text formats."""
        self.supported_formats = [
            FileFormat(
                name="JavaScript Object Notation",
                format="json",
                extension="json",
                mime="application/json",
                category=["data", "text"],
                lossless=True,
                from_=True,
                to=True,
                internal="json",
            ),
            FileFormat(
                name="Comma Separated Values",
                format="csv",
                extension="csv",
                mime="text/csv",
                category=["data", "text"],
                lossless=True,
                from_=True,
                to=True,
                internal="csv",
            ),
        ]
        self.ready = True

    async def do_convert(
        self,
        input_files: Sequence[FileData],
        input_format: FileFormat,
        output_format: FileFormat,
    ) -> list[FileData]:
        """Convert every input file between JSON records and CSV rows."""
        outputs: list[FileData] = []
        for item in input_files:
            if input_format.internal == "json" and output_format.internal == "csv":
                data = _json_to_csv(item.data)
            elif input_format.internal == "csv" and output_format.internal == "json":
                data = _csv_to_json(item.data)
            else:
                raise ConversionError(
                    f"Unsupported conversion {input_format.internal!r} -> "
                    f"{output_format.internal!r}."
                )
            outputs.append(
                FileData(name=replace_extension(item.name, output_format.extension), data=data)
            )
        return outputs


def _json_to_csv(data: bytes) -> bytes:
    try:
        records = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ConversionError(f"Invalid JSON input: {exc}") from exc
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ConversionError("JSON input must be an array of objects.")

    columns: list[str] = []
    for record in records:
        columns.extend(key for key in record if key not in columns)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    writer.writerows(records)
    return buffer.getvalue().encode("utf-8")


def _csv_to_json(data: bytes) -> bytes:
    reader = csv.DictReader(io.StringIO(data.decode("utf-8")))
    return json.dumps(list(reader), indent=2).encode("utf-8")


HANDLER = TableHandler()
