"""
SupplierIQ CLI

Usage:
    supplieriq init --db supplieriq.db
    supplieriq seed --db supplieriq.db
    supplieriq request create --category metals --description "Aluminum casings" \
        --quantity 5000 --budget 15000 --region DE --db supplieriq.db
    supplieriq suggestions list --request-id <id> --db supplieriq.db
    supplieriq suppliers list --db supplieriq.db
    supplieriq serve --db supplieriq.db --port 8080
"""

import asyncio
import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from supplieriq.app import SupplierIQ
from supplieriq.kernel.logging import configure_logging
from supplieriq.kernel.settings import Settings
from supplieriq.procurement.models import Urgency
from supplieriq.procurement.reader import suggestion_row

_env_settings = Settings.from_env()
configure_logging(json_output=_env_settings.json_logs, log_level=_env_settings.log_level)

app = typer.Typer(
    name="supplieriq",
    help="SupplierIQ - ranked supplier suggestions for procurement requests",
    add_completion=False,
)

request_app = typer.Typer(help="Procurement request commands")
suggestions_app = typer.Typer(help="Supplier suggestion commands")
suppliers_app = typer.Typer(help="Supplier registry commands")

app.add_typer(request_app, name="request")
app.add_typer(suggestions_app, name="suggestions")
app.add_typer(suppliers_app, name="suppliers")

DEFAULT_DB = Path("supplieriq.db")

DbOption = Annotated[Optional[Path], typer.Option("--db", help="Database path")]


def get_iq(db_path: Optional[Path] = None) -> SupplierIQ:
    """SupplierIQ instance on an existing database"""
    db = db_path or _env_settings.db_path or DEFAULT_DB
    if not db.exists():
        typer.echo(f"Error: Database not found: {db}", err=True)
        typer.echo(f"Run 'supplieriq init --db {db}' to initialize", err=True)
        raise typer.Exit(1)
    return SupplierIQ(settings=_env_settings.model_copy(update={"db_path": db}))


@app.command()
def init(
    db: Annotated[Path, typer.Option(help="Database path")] = DEFAULT_DB,
) -> None:
    """Initialize a new SupplierIQ database"""
    if db.exists():
        typer.echo(f"Error: Database already exists: {db}", err=True)
        raise typer.Exit(1)

    SupplierIQ(settings=_env_settings.model_copy(update={"db_path": db}))
    typer.echo(f"✓ Initialized SupplierIQ database: {db}")


@app.command()
def seed(db: DbOption = None) -> None:
    """Load the demo supplier data set"""
    iq = get_iq(db)
    counts = asyncio.run(iq.seed_demo_data())
    typer.echo("✓ Seeded demo data")
    for name, count in counts.items():
        typer.echo(f"  {name.capitalize()}: {count}")


@app.command()
def serve(
    db: DbOption = None,
    port: Annotated[int, typer.Option(help="Port to listen on")] = 8080,
) -> None:
    """Serve health checks and suggestion reads over HTTP"""
    from supplieriq.health_server import initialize_health_server, run_health_server

    initialize_health_server(get_iq(db))
    run_health_server(port=port)


# Request commands


async def _create_and_wait(iq: SupplierIQ, **fields: object) -> tuple[str, str, int]:
    request, _ = await iq.submit_request(**fields)
    await iq.wait_for_pipelines()
    stored = await iq.get_request(request.request_id)
    suggestions = await iq.get_suggestions(request.request_id)
    status = stored.status.value if stored else "unknown"
    return request.request_id, status, len(suggestions)


@request_app.command("create")
def request_create(
    category: Annotated[str, typer.Option("--category", help="Goods category")],
    description: Annotated[str, typer.Option("--description", help="What is needed")],
    quantity: Annotated[int, typer.Option("--quantity", help="Units requested")],
    budget: Annotated[str, typer.Option("--budget", help="Budget (decimal)")],
    region: Annotated[str, typer.Option("--region", help="Delivery region code")],
    urgency: Annotated[
        Urgency, typer.Option("--urgency", help="low, medium, high or critical")
    ] = Urgency.MEDIUM,
    db: DbOption = None,
) -> None:
    """Create a request and generate its supplier suggestions"""
    iq = get_iq(db)
    try:
        request_id, status, count = asyncio.run(
            _create_and_wait(
                iq,
                category=category,
                description=description,
                quantity=quantity,
                budget=Decimal(budget),
                region=region,
                urgency=urgency,
            )
        )
    except (ValidationError, ArithmeticError) as e:
        typer.echo(f"Error: Invalid request: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Created request: {request_id}")
    typer.echo(f"  Status: {status}")
    typer.echo(f"  Suggestions: {count}")


@request_app.command("show")
def request_show(
    request_id: Annotated[str, typer.Option("--request-id", help="Request ID")],
    db: DbOption = None,
) -> None:
    """Show a request and its status"""
    iq = get_iq(db)
    request = asyncio.run(iq.get_request(request_id))
    if request is None:
        typer.echo(f"Error: Request not found: {request_id}", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(request.model_dump(mode="json"), indent=2))


# Suggestion commands


@suggestions_app.command("list")
def suggestions_list(
    request_id: Annotated[str, typer.Option("--request-id", help="Request ID")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db: DbOption = None,
) -> None:
    """List ranked suggestions for a request (best first)"""
    iq = get_iq(db)
    rows = asyncio.run(iq.get_suggestions_with_suppliers(request_id))

    if json_output:
        typer.echo(json.dumps([suggestion_row(s, sup) for s, sup in rows], indent=2))
        return

    if not rows:
        typer.echo(f"No suggestions for request {request_id}")
        return

    typer.echo(f"Suggestions for request {request_id} ({len(rows)}):")
    for s, supplier in rows:
        typer.echo(
            f"  #{s.rank} {supplier.name if supplier else s.supplier_id} "
            f"(match {s.match_score:.2f}, risk {s.risk_score})"
        )
        typer.echo(f"     {s.explanation}")


# Supplier commands


@suppliers_app.command("list")
def suppliers_list(db: DbOption = None) -> None:
    """List registered suppliers"""
    iq = get_iq(db)
    suppliers = asyncio.run(iq.list_suppliers())

    if not suppliers:
        typer.echo("No suppliers registered")
        return

    typer.echo(f"Suppliers ({len(suppliers)}):")
    for s in suppliers:
        flag = "" if s.is_active else " [inactive]"
        typer.echo(f"  {s.supplier_id}: {s.name} ({s.category}, {s.region}){flag}")


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
