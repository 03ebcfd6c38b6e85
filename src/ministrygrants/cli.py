"""Command-line interface for Ministry-Grants."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from typer.main import get_command

from . import __version__
from .core.config import get_settings
from .core.database_manager import DatabaseManager
from .core.exceptions import BaseMinistryGrantsException
from .models.database import MAX_ENTITY_ID, MinistryCategory
from .schemas import MinistryFilter
from .services.dashboard_service import DashboardService
from .services.grant_service import GrantService
from .services.ledger_service import LedgerService
from .services.ministry_service import MinistryService
from .services.seed import seed_demo_data
from .utils.logging import configure_logging, get_logger

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

T = TypeVar("T")

# Create the main Typer app
typer_app = typer.Typer(
    name="ministry-grants",
    help="Ministry-Grants - Donor-advised fund grant management for ministries, giving funds and grant workflows",
    add_completion=False,
)
typer_app.info_name = "ministry-grants"

# Sub-apps for organization
db_app = typer.Typer(help="Database management commands")
ministries_app = typer.Typer(help="Ministry directory commands")
grants_app = typer.Typer(help="Grant workflow commands")
funds_app = typer.Typer(help="Giving fund commands")
typer_app.add_typer(db_app, name="db")
typer_app.add_typer(ministries_app, name="ministries")
typer_app.add_typer(grants_app, name="grants")
typer_app.add_typer(funds_app, name="funds")


def run_with_database(operation: Callable[[DatabaseManager], Awaitable[T]]) -> T:
    """Run ``operation`` against a freshly initialized database manager."""

    async def runner() -> T:
        db_manager = DatabaseManager(get_settings())
        await db_manager.initialize()
        try:
            if db_manager.settings.auto_create_schema:
                await db_manager.create_all()
            return await operation(db_manager)
        finally:
            await db_manager.shutdown()

    return asyncio.run(runner())


def fail(exc: BaseMinistryGrantsException) -> None:
    console.print(f"[bold red]{exc.error_code}: {exc.message}[/bold red]")
    raise typer.Exit(1)


@typer_app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    version: bool = typer.Option(False, "--version", help="Show version and exit", is_eager=True),
):
    """Ministry-Grants - Donor-advised fund grant management."""
    if version:
        console.print(f"Ministry-Grants v{__version__}")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)

    settings = get_settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings, force=True)


@db_app.command("init")
def db_init(
    drop_existing: bool = typer.Option(False, "--drop-existing", help="Drop existing tables first"),
):
    """Initialize the database."""
    console.print("[bold blue]Initializing Database[/bold blue]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Setting up database...", total=None)

        async def initialize(db_manager: DatabaseManager) -> None:
            await db_manager.create_all(drop_existing=drop_existing)

        run_with_database(initialize)
        progress.update(task, completed=True)

    console.print("[bold green]Database initialized[/bold green]")


@db_app.command("seed")
def db_seed():
    """Replace all data with the demo data set."""
    console.print("[bold blue]Seeding Database[/bold blue]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Seeding database...", total=None)
        summary = run_with_database(seed_demo_data)
        progress.update(task, completed=True)

    console.print("[bold green]Database seeded[/bold green]")
    console.print(
        f"{summary['ministries']} ministries ({summary['verified_ministries']} verified), "
        f"{summary['donors']} donors, {summary['funds']} giving funds, {summary['grants']} grants"
    )


@typer_app.command("serve")
def serve_api(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """
    Start FastAPI web server for API access.
    """
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"Starting FastAPI server on {host}:{port}...")
    console.print(f"[bold blue]API Documentation: http://{host}:{port}/docs[/bold blue]")

    try:
        uvicorn.run(
            "ministrygrants.web.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        console.print("\n[bold blue]FastAPI server stopped.[/bold blue]")


@typer_app.command("stats")
def stats():
    """Show dashboard statistics."""

    async def load(db_manager: DatabaseManager):
        return await DashboardService(db_manager).get_stats()

    result = run_with_database(load)

    table = Table(title="Ministry-Grants Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")

    table.add_row("Ministries", str(result.total_ministries))
    table.add_row("Verified ministries", str(result.verified_ministries))
    table.add_row("Donors", str(result.total_donors))
    table.add_row("Giving funds", str(result.total_funds))
    table.add_row("Total balance", f"${result.total_balance.to_fixed()}")
    table.add_row("Total disbursed", f"${result.total_disbursed.to_fixed()}")
    table.add_row("Pending amount", f"${result.pending_amount.to_fixed()}")
    counts = result.grants_by_status
    table.add_row("Grants pending", str(counts.pending))
    table.add_row("Grants approved", str(counts.approved))
    table.add_row("Grants funded", str(counts.funded))
    table.add_row("Grants rejected", str(counts.rejected))
    table.add_row("Grants total", str(counts.total))

    console.print(table)


@ministries_app.command("list")
def ministries_list(
    category: Optional[MinistryCategory] = typer.Option(None, "--category", help="Exact category"),
    verified: Optional[bool] = typer.Option(None, "--verified/--unverified", help="Verification status"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Substring of the name"),
    limit: int = typer.Option(20, "--limit", "-n", help="Page size"),
    after: Optional[str] = typer.Option(None, "--after", help="Cursor to continue from"),
):
    """List ministries one page at a time."""
    filter = MinistryFilter(category=category, verified=verified, search=search)

    async def load(db_manager: DatabaseManager):
        return await MinistryService(db_manager).list_ministries(filter, limit=limit, after=after)

    try:
        connection = run_with_database(load)
    except BaseMinistryGrantsException as exc:
        fail(exc)

    table = Table(title=f"Ministries ({connection.page_info.total_count} total)")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("State")
    table.add_column("Verified")

    for edge in connection.edges:
        node = edge.node
        table.add_row(
            str(node.id),
            node.name,
            node.category.value,
            node.state or "",
            "yes" if node.verified else "no",
        )

    console.print(table)
    if connection.page_info.has_next_page:
        console.print(f"Next page: --after {connection.page_info.end_cursor}")


@grants_app.command("approve")
def grants_approve(grant_id: int = typer.Argument(..., max=MAX_ENTITY_ID, help="Grant ID")):
    """Approve a pending grant."""
    try:
        grant = run_with_database(lambda db: GrantService(db).approve_grant(grant_id))
    except BaseMinistryGrantsException as exc:
        fail(exc)
    console.print(f"[bold green]Grant {grant.id} approved[/bold green]")


@grants_app.command("reject")
def grants_reject(
    grant_id: int = typer.Argument(..., max=MAX_ENTITY_ID, help="Grant ID"),
    reason: Optional[str] = typer.Option(None, "--reason", "-r", help="Reason appended to the grant notes"),
):
    """Reject a pending or approved grant."""
    try:
        grant = run_with_database(lambda db: GrantService(db).reject_grant(grant_id, reason))
    except BaseMinistryGrantsException as exc:
        fail(exc)
    console.print(f"[bold green]Grant {grant.id} rejected[/bold green]")


@grants_app.command("fund")
def grants_fund(grant_id: int = typer.Argument(..., max=MAX_ENTITY_ID, help="Grant ID")):
    """Fund an approved grant from its giving fund."""
    try:
        grant = run_with_database(lambda db: GrantService(db).fund_grant(grant_id))
    except BaseMinistryGrantsException as exc:
        fail(exc)
    console.print(f"[bold green]Grant {grant.id} funded: ${grant.amount.to_fixed()}[/bold green]")


@funds_app.command("contribute")
def funds_contribute(
    fund_id: int = typer.Argument(..., max=MAX_ENTITY_ID, help="Giving fund ID"),
    amount: str = typer.Argument(..., help="Amount, e.g. 2500.00"),
):
    """Add money to a giving fund."""
    try:
        fund = run_with_database(lambda db: LedgerService(db).contribute(fund_id, amount))
    except BaseMinistryGrantsException as exc:
        fail(exc)
    console.print(f"[bold green]{fund.name} balance: ${fund.balance.to_fixed()}[/bold green]")


# Click command for the console script and CliRunner
app = get_command(typer_app)

if __name__ == "__main__":
    app()
