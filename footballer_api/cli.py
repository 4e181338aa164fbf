"""
Footballer API CLI
==================

Command-line interface for running and maintaining the service.

Usage:
    footballer-api <command> [options]

Commands:
    serve        Run the API with uvicorn
    db:check     Verify the database is reachable
    db:seed      Load demo footballers

Examples:
    footballer-api serve --port 4000 --reload
    footballer-api db:seed --force
"""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from footballer_api.config import settings, configure_logging

console = Console()


@click.group()
@click.version_option(version=settings.api_version)
def cli():
    """Footballer API - service and database utilities."""
    configure_logging()


@cli.command("serve")
@click.option("--host", type=str, default="0.0.0.0", help="Bind address")
@click.option("--port", type=int, default=4000, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def cmd_serve(host: str, port: int, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run("footballer_api.main:app", host=host, port=port, reload=reload)


# =============================================================================
# DATABASE COMMANDS
# =============================================================================

@cli.command("db:check")
def cmd_db_check():
    """Check database connectivity."""
    from footballer_api.database import check_database_connection, engine

    async def run():
        try:
            await check_database_connection()
        finally:
            await engine.dispose()

    try:
        asyncio.run(run())
    except Exception as e:
        console.print(f"[red]Database unreachable:[/red] {e}")
        raise SystemExit(1)

    console.print("[green]Database connection OK[/green]")


@cli.command("db:seed")
@click.option("--force", is_flag=True, help="Delete existing footballers first")
def cmd_db_seed(force: bool):
    """Load demo footballers."""
    from footballer_api.database import async_session_factory, engine
    from footballer_api.seed import clear_footballers, seed_footballers

    console.print("\n[bold]Footballer API - Demo Seed[/bold]\n")

    async def run():
        try:
            async with async_session_factory() as session:
                if force:
                    await clear_footballers(session)
                    console.print("Cleared existing footballers")
                return await seed_footballers(session)
        finally:
            await engine.dispose()

    footballers = asyncio.run(run())

    table = Table(title=f"Seeded {len(footballers)} footballers")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Club")
    table.add_column("Positions")
    table.add_column("Goals", justify="right")

    for f in footballers:
        table.add_row(str(f.id), f.name, f.club, ", ".join(f.position), str(f.goals))

    console.print(table)


if __name__ == "__main__":
    cli()
