#!/usr/bin/env python3
"""CLI for mealplan-parser: turn ingredient text and recipe pages into structured data.

Subcommands:
- ``ingredients [FILE]``: parse pasted ingredient lines (stdin when FILE is omitted)
- ``html FILE``: extract a recipe from a saved HTML page
- ``import URL``: fetch a recipe page and extract its recipe

The CLI is responsible for:
- Argument parsing
- Configuration and logging setup
- Rich output (tables and panels) or JSON with ``--json``
- Error presentation

Parsing and fetching are delegated to the library modules.
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import logging
import sys
from pathlib import Path

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .config import ImportConfig
from .exceptions import ConfigurationError, InvalidRecipeUrlError, RecipeFetchError
from .ingredients import parse_ingredients_with_diagnostics
from .models import ImportedRecipe, ParseDiagnostics, ScrapedRecipe
from .quantities import format_qty
from .recipe_import import fetch_recipe_html, import_recipe, parse_recipe_from_html
from .retry import RetryPolicy

# Create global Rich console for styled output
console = Console()


def setup_logging(log_file: str | Path = "mealplan_parser.log", debug: bool = False) -> None:
    """Set up logging configuration for the application.

    Configures logging to output detailed logs to a file only.
    Console output is handled separately via Rich.

    Args:
        log_file: Path to the log file. Defaults to "mealplan_parser.log".
        debug: Log at DEBUG instead of INFO level.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.FileHandler(log_file, mode="w")],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_progress() -> Progress:
    """Create a Rich spinner for network operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``

    Returns:
        Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Parse ingredient lists and extract recipes from web pages",
        prog="mealplan-parse",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print JSON instead of formatted tables"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to a TOML config file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    ingredients = subparsers.add_parser("ingredients", help="Parse ingredient lines")
    ingredients.add_argument(
        "file", nargs="?", default=None, help="Text file, one ingredient per line (default: stdin)"
    )

    html = subparsers.add_parser("html", help="Extract a recipe from a saved HTML page")
    html.add_argument("file", help="Path to an HTML file")

    import_cmd = subparsers.add_parser("import", help="Fetch a recipe page and extract it")
    import_cmd.add_argument("url", help="Recipe page URL (https:// is assumed when omitted)")

    return parser.parse_args(argv)


def display_error(title: str, message: str) -> None:
    """Display an error panel."""
    console.print()
    console.print(
        Panel(
            message,
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
        )
    )
    console.print()


def display_json(model: BaseModel) -> None:
    """Print a model as JSON using its wire (camelCase) field names."""
    console.print_json(model.model_dump_json(by_alias=True))


def display_ingredients(diagnostics: ParseDiagnostics) -> None:
    """Display parsed ingredients and skipped lines."""
    table = Table(
        title=f"[bold green]{len(diagnostics.ingredients)} ingredients[/bold green]",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Qty", style="green", justify="right")
    table.add_column("Unit", style="cyan")
    table.add_column("Name")

    for ingredient in diagnostics.ingredients:
        table.add_row(format_qty(ingredient.qty), ingredient.unit, escape(ingredient.name))

    console.print()
    console.print(table)

    if diagnostics.skipped_lines:
        console.print()
        console.print(f"[yellow]Skipped {len(diagnostics.skipped_lines)} lines:[/yellow]")
        for line in diagnostics.skipped_lines:
            console.print(f"  {line}", style="dim", markup=False)
    console.print()


def display_recipe(recipe: ScrapedRecipe) -> None:
    """Display a recipe: header panel, ingredient table and numbered steps."""
    details = [f"[dim]Servings:[/dim] {recipe.servings}"]
    if recipe.meal_type:
        details.append(f"[dim]Meal:[/dim] {recipe.meal_type.value}")
    if isinstance(recipe, ImportedRecipe):
        details.append(f"[dim]Source:[/dim] {escape(recipe.source_url)}")

    lines = [escape(recipe.description), ""] if recipe.description else []
    body = "\n".join([*lines, *details])

    console.print()
    console.print(
        Panel.fit(
            body,
            title=f"[bold]{escape(recipe.name) or 'Untitled recipe'}[/bold]",
            border_style="cyan",
        )
    )

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Qty", style="green", justify="right")
    table.add_column("Unit", style="cyan")
    table.add_column("Ingredient")
    for ingredient in recipe.ingredients:
        table.add_row(format_qty(ingredient.qty), ingredient.unit, escape(ingredient.name))
    console.print(table)

    console.print()
    for number, step in enumerate(recipe.steps, 1):
        console.print(f"[bold]{number}.[/bold] {escape(step)}")
    console.print()


def _read_text(path: str | None) -> str:
    if path is None:
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


async def run_import(url: str, config: ImportConfig) -> ImportedRecipe:
    """Import a recipe, retrying transient fetch failures per the config."""
    fetcher = RetryPolicy.from_config(config).wrap(
        functools.partial(fetch_recipe_html, config=config)
    )

    with create_progress() as progress:
        progress.add_task(f"Fetching {url}", total=None)
        return await import_recipe(url, fetcher=fetcher, config=config)


async def main_async(argv: list[str] | None = None) -> int:
    """Run one CLI command.

    Returns:
        Process exit status: 0 on success, 1 on user, configuration or fetch errors
    """
    args = parse_args(argv)

    try:
        config = ImportConfig.load(config_path=args.config)
    except ConfigurationError as e:
        display_error("Configuration Error", str(e))
        return 1

    setup_logging(config.log_file, config.debug_mode)
    logging.info(f"Running command: {args.command}")

    if args.command in ("ingredients", "html"):
        try:
            text = _read_text(args.file)
        except OSError as e:
            display_error(
                "Error",
                f"[bold red]Could not read file:[/bold red]\n{args.file}\n\n[dim]{e}[/dim]",
            )
            return 1

        if args.command == "ingredients":
            diagnostics = parse_ingredients_with_diagnostics(text)
            if args.json:
                display_json(diagnostics)
            else:
                display_ingredients(diagnostics)
            return 0

        recipe: ScrapedRecipe = parse_recipe_from_html(text)
    else:
        try:
            recipe = await run_import(args.url, config)
        except InvalidRecipeUrlError as e:
            display_error("Invalid URL", f"{e.message}\n\n[dim]{escape(args.url)}[/dim]")
            return 1
        except RecipeFetchError as e:
            logging.warning(f"Import failed: {e}")
            display_error(
                "Import Failed",
                f"{e.message}\n\n[dim]Check {config.log_file} for details.[/dim]",
            )
            return 1

    if args.json:
        display_json(recipe)
    else:
        display_recipe(recipe)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the mealplan-parse CLI command."""
    try:
        exit_code = asyncio.run(main_async(argv))
    except KeyboardInterrupt:
        console.print()
        console.print(
            Panel(
                "[yellow]Interrupted by user[/yellow]",
                title="[bold yellow]Interrupted[/bold yellow]",
                border_style="yellow",
            )
        )
        console.print()
        raise SystemExit(130) from None
    except Exception as e:  # Intentional catch-all for CLI entry point
        console.print()
        console.print(
            Panel(
                f"[bold red]An unexpected error occurred:[/bold red]\n\n"
                f"{e!s}\n\n"
                f"[dim]Check the log file for detailed error information.[/dim]",
                title="[bold red]Error[/bold red]",
                border_style="red",
            )
        )
        console.print()
        logging.exception("Unexpected error during processing")
        raise

    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
