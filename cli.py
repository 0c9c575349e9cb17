"""
CLI tool for library catalog administration.

Provides commands for seeding a development database and listing the HTTP
routes the application serves.
"""

import asyncio
import random

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="library-cli",
    help="Library catalog CLI - Seed demo data and inspect the API",
    add_completion=False,
)
console = Console()


@typer_app.command(name="seed")
def seed(
    drop: bool = typer.Option(
        False, "--drop", help="Drop existing tables before creating them"
    ),
    random_seed: int | None = typer.Option(
        None, "--random-seed", help="Seed for author assignment (reproducible data)"
    ),
):
    """
    Create the tables and load the demo fixtures.

    Loads 10 authors, 20 books and two accounts
    (test1.test1@sfr.fr / ROLE_USER, test2.test2@sfr.fr / ROLE_ADMIN,
    both with password "password").

    Example:
        python cli.py seed --drop
    """
    from library_api.storage.db import async_session, create_db_and_tables
    from library_api.storage.fixtures import load_fixtures

    async def run() -> None:
        await create_db_and_tables(drop_existing=drop)
        async with async_session() as session:
            await load_fixtures(session, random.Random(random_seed))

    asyncio.run(run())

    console.print()
    console.print(
        Panel.fit(
            "[green]✓ Fixtures loaded[/green]\n\n"
            "Authors: 10  Books: 20  Users: 2",
            border_style="green",
            title="Success",
        )
    )
    console.print()


@typer_app.command(name="routes")
def routes():
    """
    Display a table of every HTTP route and the roles it requires.

    Example:
        python cli.py routes
    """
    from library_api.dependencies.permissions import require_admin
    from library_api.routing import collect_api_routes
    from library_api.settings import app_settings

    table = Table(
        "Method",
        "Path",
        "Name",
        "Requires",
        title="HTTP Routes",
        show_lines=True,
    )

    for route in collect_api_routes():
        gated = any(dep.dependency is require_admin for dep in route.dependencies)
        requires = (
            f"[yellow]{app_settings.ADMIN_ROLE}[/yellow]"
            if gated
            else "[dim]public[/dim]"
        )
        for method in sorted(route.methods):
            table.add_row(
                f"[green]{method}[/green]", route.path, route.name, requires
            )

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    typer_app()
