"""Catalog maintenance CLI commands."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlmodel import Session

from src.catalog.core.errors import ApiError
from src.catalog.core.services import DbManageService, DbSessionService, NullMetricsSink
from src.catalog.core.services.catalog.sync import ExternalSyncService
from src.catalog.core.services.external.dummyjson import ExternalCatalogClient
from src.catalog.entities.service.product import ProductRepository
from src.catalog.runtime.context import get_config

console = Console()

catalog_app = typer.Typer(
    help="🛒  Product Catalog CLI - database, sync and server tools",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _sync_service(session: Session) -> ExternalSyncService:
    config = get_config()
    return ExternalSyncService(
        session,
        ExternalCatalogClient(config.external_source),
        NullMetricsSink(),
        fetch_limit=config.external_source.fetch_limit,
    )


@catalog_app.command("init-db")
def init_db() -> None:
    """Create the database tables."""
    DbManageService().create_all()
    console.print(f"[green]Tables created on {get_config().database.backend}[/green]")


@catalog_app.command("backfill-active")
def backfill_active() -> None:
    """Mark products created before the active flag existed as active."""
    modified = DbManageService().initialize_active_field()
    console.print(f"[green]{modified} products updated[/green]")


@catalog_app.command("sync")
def sync(
    limit: int | None = typer.Option(None, "--limit", "-l", min=1, help="Products to fetch"),
    legacy: bool = typer.Option(
        False, "--legacy", help="Upsert instead of replacing imported products"
    ),
) -> None:
    """Import products from the external catalog."""
    config = get_config()
    console.print(
        Panel.fit(
            f"[bold]Syncing from {config.external_source.base_url}[/bold]",
            border_style="blue",
        )
    )
    database_service = DbSessionService()
    DbManageService(database_service).create_all()
    session = database_service.get_session()
    try:
        service = _sync_service(session)
        if legacy:
            upserted = asyncio.run(service.sync_upsert(limit))
            console.print(
                f"[green]{upserted.upserted_count} inserted, "
                f"{upserted.modified_count} updated, {upserted.failed} failed[/green]"
            )
        else:
            result = asyncio.run(service.sync_replace(limit))
            console.print(
                f"[green]{result.imported_count} products imported "
                f"({result.deleted_count} replaced), sample: {result.sample}[/green]"
            )
    except ApiError as e:
        console.print(f"[red]❌ Sync failed: {e.message}[/red]")
        for detail in e.errors:
            console.print(f"[red]   {detail}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        session.close()


@catalog_app.command("upload")
def upload(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON export to load"),
) -> None:
    """Upsert products from a JSON export of the external catalog."""
    database_service = DbSessionService()
    DbManageService(database_service).create_all()
    session = database_service.get_session()
    try:
        result = _sync_service(session).upload_file(file)
    except (ApiError, ValueError) as e:
        console.print(f"[red]❌ Upload failed: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        session.close()
    console.print(
        f"[green]{result.upserted_count} inserted, {result.modified_count} updated, "
        f"{result.failed} failed[/green]"
    )


@catalog_app.command("categories")
def categories() -> None:
    """List the distinct product categories."""
    database_service = DbSessionService()
    with database_service.session_scope() as session:
        names = ProductRepository(session).distinct_categories()

    if not names:
        console.print("[yellow]No categories found[/yellow]")
        return

    table = Table(title="Product categories")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Category", style="green")
    for index, name in enumerate(names, start=1):
        table.add_row(str(index), name)
    console.print(table)
