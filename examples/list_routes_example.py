#!/usr/bin/env python3
"""Print candidate routes and convert a file using the example table plugin."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from format_router.api import convert_file, list_routes
from format_router.routing.paths import render_path

PLUGIN = Path(__file__).resolve().parent / "table_handlers_plugin.py"


def main() -> None:
    """List JSON to CSV routes, then run the cheapest working one."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    for cost, path in list_routes(
        "application/json", "text/csv", handler_modules=[str(PLUGIN)]
    ):
        print(f"[{cost:.3f}] {render_path(path)}")

    with tempfile.TemporaryDirectory() as tmp:
        source = Path(tmp) / "people.json"
        source.write_text('[{"name": "Ada", "age": 36}, {"name": "Alan"}]', encoding="utf-8")
        written = convert_file(
            source,
            Path(tmp) / "out",
            input_mime="application/json",
            output_mime="text/csv",
            handler_modules=[str(PLUGIN)],
        )
        for output in written:
            print(f"{output.name}:\n{output.read_text(encoding='utf-8')}")


if __name__ == "__main__":
    main()
