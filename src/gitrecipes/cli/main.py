"""Main CLI entry point for gitrecipes."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitrecipes.constants import DEFAULT_REPOS_ROOT, EXIT_USER_ERROR
from gitrecipes.core import (
    GraphError,
    Recipe,
    RecipeError,
    Workspace,
    load_recipes,
    take_snapshot,
)
from gitrecipes.core.recipe import dumps_recipes
from gitrecipes.recipes import BUILTIN_RECIPES
from gitrecipes.storage import StorageError

logger = logging.getLogger(__name__)

console = Console()
app = typer.Typer(
    name="gitrecipes",
    help="Build git repositories with precisely specified commit graphs",
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _collect_recipes(files: Optional[List[Path]]) -> Tuple[Dict[str, Recipe], List[str]]:
    """Bundled recipes followed by recipes from files (later names win).

    Returns:
        All recipes by name, and the names defined by the files in file order
    """
    recipes = dict(BUILTIN_RECIPES)
    from_files: List[str] = []
    for path in files or []:
        for recipe in load_recipes(path):
            if recipe.name in recipes:
                logger.info(
                    "Recipe %r from %s replaces an earlier definition", recipe.name, path
                )
            recipes[recipe.name] = recipe
            if recipe.name not in from_files:
                from_files.append(recipe.name)
    return recipes, from_files


def _select(
    recipes: Dict[str, Recipe], names: Optional[List[str]], from_files: List[str]
) -> List[Recipe]:
    if names:
        unknown = [name for name in names if name not in recipes]
        if unknown:
            console.print(
                f"[bold red]Error:[/bold red] Unknown recipe(s): {', '.join(unknown)}",
                style="red",
            )
            console.print(
                f"  Available: {', '.join(recipes)}",
                style="dim",
            )
            raise typer.Exit(EXIT_USER_ERROR)
        return [recipes[name] for name in names]

    if from_files:
        return [recipes[name] for name in from_files]

    return list(BUILTIN_RECIPES.values())


@app.command()
def version() -> None:
    """Show gitrecipes version."""
    from gitrecipes import __version__
    typer.echo(f"gitrecipes version {__version__}")


@app.command(name="list")
def list_recipes(
    files: Optional[List[Path]] = typer.Option(
        None,
        "--file",
        "-f",
        help="Also list recipes from this JSON file (repeatable)",
    ),
) -> None:
    """List available recipes."""
    try:
        recipes, _ = _collect_recipes(files)
    except (RecipeError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(EXIT_USER_ERROR)

    table = Table(title="Recipes")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Commits", justify="right")
    table.add_column("Branches", justify="right")
    table.add_column("Description", style="dim")

    for recipe in recipes.values():
        table.add_row(
            recipe.name,
            str(len(recipe.commits)),
            str(len(recipe.branches)),
            recipe.description,
        )

    console.print(table)


@app.command()
def build(
    names: Optional[List[str]] = typer.Argument(
        None,
        help="Recipes to build (default: every bundled recipe, or every recipe in --file)",
    ),
    root: Path = typer.Option(
        DEFAULT_REPOS_ROOT,
        "--root",
        "-r",
        help="Directory holding one workspace per recipe",
    ),
    files: Optional[List[Path]] = typer.Option(
        None,
        "--file",
        "-f",
        help="Load recipes from this JSON file (repeatable)",
    ),
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        help="Fixed commit time in seconds since epoch, for reproducible commit ids",
    ),
    keep_going: bool = typer.Option(
        False,
        "--keep-going",
        "-k",
        help="Continue with the next recipe when one fails",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every commit",
    ),
) -> None:
    """Build recipes into fresh git repositories."""
    _configure_logging(verbose)

    try:
        recipes, from_files = _collect_recipes(files)
        selected = _select(recipes, names, from_files)
    except (RecipeError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(EXIT_USER_ERROR)

    failed = []
    for recipe in selected:
        workspace = Workspace(recipe.name, root=root, timestamp=timestamp)
        try:
            tips = workspace.create(recipe)
        except (GraphError, StorageError) as e:
            failed.append(recipe.name)
            console.print(
                f"[bold red]Error:[/bold red] Failed to build {recipe.name}: {e}",
                style="red",
            )
            if not keep_going:
                raise typer.Exit(EXIT_USER_ERROR)
            continue

        if not quiet:
            console.print(
                f"[bold green]✓[/bold green] Built [cyan]{recipe.name}[/cyan] "
                f"[dim]({len(recipe.commits)} commit(s), {len(tips)} branch(es))[/dim] "
                f"-> {workspace.path}"
            )

    if failed:
        console.print(
            f"\n[yellow]{len(failed)} recipe(s) failed: {', '.join(failed)}[/yellow]"
        )
        raise typer.Exit(EXIT_USER_ERROR)

    if not quiet and len(selected) > 1:
        console.print(f"\n[bold green]>[/bold green] {len(selected)} repositories built in {root}")


@app.command()
def show(
    name: str = typer.Argument(..., help="Workspace (recipe) name"),
    root: Path = typer.Option(
        DEFAULT_REPOS_ROOT,
        "--root",
        "-r",
        help="Directory holding one workspace per recipe",
    ),
    format: str = typer.Option(  # noqa: A002
        "default",
        "--format",
        help="Output format: default, json",
    ),
) -> None:
    """Show branches and commit graph of a built workspace."""
    try:
        workspace = Workspace(name, root=root)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Workspace {e}", style="red")
        raise typer.Exit(EXIT_USER_ERROR)

    if not workspace.exists():
        console.print(
            f"[bold red]Error:[/bold red] Workspace not found: {workspace.path}",
            style="red",
        )
        console.print(
            f"\nRun [bold]gitrecipes build {name}[/bold] to create it",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)

    try:
        snapshot = take_snapshot(workspace.repo())
    except StorageError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(EXIT_USER_ERROR)

    if format == "json":
        payload = {
            "branches": {
                branch: snapshot.commits[label].oid
                for branch, label in snapshot.branches.items()
            },
            "commits": [
                {
                    "oid": commit.oid,
                    "message": commit.message,
                    "parents": [snapshot.commits[p].oid for p in commit.parents],
                }
                for commit in snapshot.commits
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    branch_lines = "\n".join(
        f"[cyan]{branch}[/cyan] -> [yellow]{snapshot.tip(branch).oid[:7]}[/yellow] "
        f"{escape(snapshot.tip(branch).message)}"
        for branch in snapshot.branches
    )
    console.print(
        Panel(
            branch_lines or "[dim]No branches[/dim]",
            title=f"{name} ({snapshot.commit_count} commit(s))",
            border_style="green",
        )
    )

    for commit in snapshot.commits:
        if commit.parents:
            parents = ", ".join(
                f"{snapshot.commits[p].oid[:7]} {escape(snapshot.commits[p].message)}"
                for p in commit.parents
            )
            parent_str = f"[dim]parents: {parents}[/dim]"
        else:
            parent_str = "[dim](root commit)[/dim]"
        console.print(f"[yellow]{commit.oid[:7]}[/yellow] {escape(commit.message)}  {parent_str}")


@app.command()
def export(
    names: Optional[List[str]] = typer.Argument(
        None,
        help="Bundled recipes to export (default: all)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON to this file instead of stdout",
    ),
) -> None:
    """Export bundled recipes as JSON accepted by --file."""
    recipes = _select(dict(BUILTIN_RECIPES), names, [])
    text = dumps_recipes(recipes)

    if output is None:
        typer.echo(text)
        return

    try:
        output.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(EXIT_USER_ERROR)
    console.print(f"[bold green]✓[/bold green] Exported {len(recipes)} recipe(s) to {output}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
