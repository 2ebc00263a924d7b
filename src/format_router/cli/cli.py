#!/usr/bin/env python3
"""
format_router.cli.cli

Typer-based CLI for finding and running multi-hop format conversions.

Examples
--------
List the formats the installed handlers declare:

    format-router formats

Show the cheapest candidate routes between two MIME types:

    format-router routes application/x-navi-animation image/vnd.microsoft.icon

Convert a file, loading extra handlers from a plugin module:

    format-router --handler-module ./my_handlers.py convert in.ani -o out/ \
        --from application/x-navi-animation --to image/vnd.microsoft.icon
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from format_router.errors import FormatRouterError, RouteNotFoundError

if TYPE_CHECKING:
    from format_router.handlers.registry import HandlerRegistry
    from format_router.schemas import RoutingCostConfig

app = typer.Typer(
    name="format-router",
    help="Convert files between formats by chaining conversion handlers.",
    no_args_is_help=True,
)

HANDLER_MODULE_HELP = "Python module or file path exposing extra handlers (repeatable)."
ADVANCED_HELP = "Require the goal handler to perform the final hop."


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Install a root logging handler for CLI runs."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised by the command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"[red]✗ {type(exc).__name__}:[/red] {exc}", err=True)
    if debug:
        typer.echo("\n[dim]Traceback:[/dim]", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _state(ctx: typer.Context) -> dict[str, object]:
    return ctx.obj if isinstance(ctx.obj, dict) else {}


def _costs(ctx: typer.Context) -> RoutingCostConfig:
    from format_router.schemas import RoutingCostConfig

    return RoutingCostConfig(category_hard_search=bool(_state(ctx).get("hard_category_cost")))


def _registry(ctx: typer.Context) -> HandlerRegistry:
    from format_router.handlers.registry import create_default_registry

    modules = _state(ctx).get("handler_modules") or []
    return create_default_registry(extra_modules=list(modules))


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and full tracebacks."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logs."),
    handler_module: list[str] | None = typer.Option(
        None, "--handler-module", help=HANDLER_MODULE_HELP
    ),
    hard_category_cost: bool = typer.Option(
        False,
        "--hard-category-cost",
        help="Charge every category pair instead of the cheapest one.",
    ),
) -> None:
    """Initialize shared CLI state."""
    _configure_logging(verbose=verbose, debug=debug)
    ctx.obj = {
        "debug": debug,
        "handler_modules": handler_module or [],
        "hard_category_cost": hard_category_cost,
    }


# -----------------------------
# Commands
# -----------------------------
@app.command("formats")
def formats_cmd(ctx: typer.Context) -> None:
    """List formats declared by every available handler."""
    from format_router.application.catalog import CapabilityCache

    debug = bool(_state(ctx).get("debug", False))
    try:
        cache = CapabilityCache(_registry(ctx))
        catalog = asyncio.run(cache.refresh())
    except FormatRouterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    for handler, formats in catalog.items():
        typer.echo(f"{handler}:")
        for fmt in formats:
            access = ("r" if fmt.from_ else "-") + ("w" if fmt.to else "-")
            categories = ",".join(fmt.categories)
            lossless = " lossless" if fmt.lossless else ""
            typer.echo(f"  {fmt.label:<10} {fmt.mime:<40} {access} {categories}{lossless}")


@app.command("graph")
def graph_cmd(
    ctx: typer.Context,
    edges: bool = typer.Option(False, "--edges", help="Print every node and edge."),
) -> None:
    """Build the route graph and print its size."""
    from format_router.application.catalog import CapabilityCache

    debug = bool(_state(ctx).get("debug", False))
    try:
        cache = CapabilityCache(_registry(ctx))
        asyncio.run(cache.refresh())
        graph = cache.build_graph(_costs(ctx))
    except FormatRouterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    typer.echo(f"nodes: {len(graph.nodes)}")
    typer.echo(f"edges: {len(graph.edges)}")
    if edges:
        typer.echo(graph.describe())


@app.command("routes")
def routes_cmd(
    ctx: typer.Context,
    from_mime: str = typer.Argument(..., help="Input MIME type."),
    to_mime: str = typer.Argument(..., help="Output MIME type."),
    limit: int = typer.Option(5, "--limit", min=1, help="Maximum number of routes."),
    advanced: bool = typer.Option(False, "--advanced", help=ADVANCED_HELP),
    goal_handler: str | None = typer.Option(
        None, "--goal-handler", help="Handler required for the final hop."
    ),
) -> None:
    """Print candidate conversion routes, cheapest first."""
    from format_router.api import list_routes
    from format_router.routing.paths import render_path

    debug = bool(_state(ctx).get("debug", False))
    try:
        routes = list_routes(
            from_mime,
            to_mime,
            limit=limit,
            simple_mode=not advanced,
            output_handler=goal_handler,
            registry=_registry(ctx),
            costs=_costs(ctx),
        )
        if not routes:
            raise RouteNotFoundError(f"No route from {from_mime} to {to_mime}.")
    except FormatRouterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    for position, (cost, path) in enumerate(routes, start=1):
        typer.echo(f"{position}. [{cost:.3f}] {render_path(path)}")


@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    input_paths: list[Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Input files (all in the same format).",
    ),
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", file_okay=False, help="Directory for outputs."
    ),
    from_mime: str = typer.Option(..., "--from", help="Input MIME type."),
    to_mime: str = typer.Option(..., "--to", help="Output MIME type."),
    advanced: bool = typer.Option(False, "--advanced", help=ADVANCED_HELP),
    goal_handler: str | None = typer.Option(
        None, "--goal-handler", help="Handler required for the final hop."
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", min=1, help="Maximum number of routes to try."
    ),
) -> None:
    """Convert files through the cheapest route that works."""
    from format_router.api import convert_file

    debug = bool(_state(ctx).get("debug", False))
    try:
        written = convert_file(
            input_paths,
            output_dir,
            input_mime=from_mime,
            output_mime=to_mime,
            output_handler=goal_handler,
            simple_mode=not advanced,
            max_attempts=max_attempts,
            registry=_registry(ctx),
            costs=_costs(ctx),
        )
    except (FormatRouterError, OSError) as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    for path in written:
        typer.echo(f"[green]✓ Saved:[/green] {path}")


if __name__ == "__main__":
    app()
