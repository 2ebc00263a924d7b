#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/format_router"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    # routing is pure: no handlers, no application layer, no CLI
    for path in (PACKAGE / "routing").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "import typer",
                "from typer",
                "import asyncio",
                "format_router.handlers",
                "format_router.application",
                "format_router.cli",
            ],
        )

    for path in (PACKAGE / "application").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "import typer",
                "from typer",
                "format_router.cli",
            ],
        )

    for path in (PACKAGE / "handlers").glob("*.py"):
        _assert_no_imports(path, ["format_router.application", "format_router.cli"])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
