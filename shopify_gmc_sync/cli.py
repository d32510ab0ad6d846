"""Command-line interface for the Shopify to GMC bundle sync."""

import asyncio
import json
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.json import JSON
from rich.markup import escape

from .config import SyncConfig, ENV_TEMPLATE
from .exceptions import ConfigError, SyncError
from .logging_config import setup_logging
from .sync import BundleSync, NO_BUNDLES_MESSAGE, DONE_MESSAGE

app = typer.Typer(
    name="shopify-gmc-sync",
    help="Sync tagged Shopify bundles to Google Merchant Center"
)
console = Console()

_STATUS_STYLES = {"pushed": "green", "updated": "cyan", "error": "red"}


def load_config(isolate_update_failures: Optional[bool] = None) -> SyncConfig:
    """Load configuration from the environment (and ``.env``)."""
    try:
        cfg = SyncConfig.from_env()
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if isolate_update_failures is not None:
        cfg = cfg.model_copy(update={"isolate_update_failures": isolate_update_failures})
    setup_logging(cfg.log_level)
    return cfg


def mask(secret: str) -> str:
    """Show only the last four characters of a secret."""
    if len(secret) <= 4:
        return "****"
    return f"****{secret[-4:]}"


@app.command()
def run(
    isolate_update_failures: Optional[bool] = typer.Option(
        None,
        "--isolate-update-failures/--abort-on-update-failure",
        help="Keep going when an update after a conflict fails (default from SYNC_ISOLATE_UPDATE_FAILURES)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Fetch tagged bundles from Shopify and push them to Merchant Center."""

    async def _run():
        cfg = load_config(isolate_update_failures)
        try:
            result = await BundleSync(cfg).run()
        except SyncError as e:
            console.print(f"[red]Sync error:[/red] {escape(str(e))}")
            raise typer.Exit(1)

        if as_json:
            console.print(JSON(json.dumps({
                "status": DONE_MESSAGE if result.matched else NO_BUNDLES_MESSAGE,
                "details": result.details,
            })))
            return

        if not result.matched:
            console.print(f"[yellow]{NO_BUNDLES_MESSAGE}[/yellow]")
            return

        for outcome in result.outcomes:
            style = _STATUS_STYLES[outcome.status]
            console.print(f"[{style}]{escape(outcome.message)}[/{style}]", highlight=False)
        console.print(f"\n[bold]{DONE_MESSAGE}[/bold]")

    asyncio.run(_run())


@app.command()
def preview(
    output: Optional[str] = typer.Option(None, help="Output file for the GMC payloads (optional)"),
):
    """Fetch and map bundles without pushing anything to Merchant Center."""

    async def _preview():
        cfg = load_config()
        console.print(f"[blue]Fetching bundles tagged '{escape(cfg.shopify.bundle_tag)}'...[/blue]")
        try:
            products, errors = await BundleSync(cfg).preview()
        except SyncError as e:
            console.print(f"[red]Sync error:[/red] {escape(str(e))}")
            raise typer.Exit(1)

        if not products and not errors:
            console.print(f"[yellow]{NO_BUNDLES_MESSAGE}[/yellow]")
            return

        table = Table(title="Mapped Bundles")
        table.add_column("Offer ID", style="cyan")
        table.add_column("Title", style="green")
        table.add_column("Price", justify="right", style="yellow")
        table.add_column("Availability", style="magenta")
        table.add_column("GTIN")

        for product in products:
            title = product.title[:50] + "..." if len(product.title) > 50 else product.title
            table.add_row(
                escape(product.offer_id),
                escape(title),
                f"{product.price.value} {product.price.currency}",
                product.availability,
                escape(product.gtin or "-"),
            )

        console.print(table)
        for error in errors:
            console.print(f"[red]{escape(error.message)}[/red]")

        if output:
            output_path = Path(output)
            with open(output_path, 'w') as f:
                json.dump([p.to_payload() for p in products], f, indent=2)
            console.print(f"\n[green]✓[/green] Saved to {output}")

    asyncio.run(_preview())


@app.command()
def validate():
    """Validate the environment configuration."""
    cfg = load_config()
    console.print("[green]✓[/green] Configuration is valid!")
    console.print(f"\n[bold]Store:[/bold] {cfg.shopify.store_domain}")
    console.print(f"[bold]API version:[/bold] {cfg.shopify.api_version}")
    console.print(f"[bold]Bundle tag:[/bold] {escape(cfg.shopify.bundle_tag)}")
    console.print(f"[bold]Shopify token:[/bold] {mask(cfg.shopify.access_token)}")
    console.print(f"[bold]Merchant ID:[/bold] {cfg.google.merchant_id}")
    console.print(f"[bold]Google client:[/bold] {cfg.google.client_id}")
    console.print(f"[bold]Isolate update failures:[/bold] {cfg.isolate_update_failures}")


@app.command()
def init(
    output: str = typer.Option(".env", help="Output environment file path"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
):
    """Write an environment file template with every supported variable."""
    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[red]Error: {output} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    output_path.write_text(ENV_TEMPLATE)
    console.print(f"[green]✓[/green] Environment file created: {output}")
    console.print("\n[yellow]⚠ Please edit the file and add your Shopify and Google credentials![/yellow]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
):
    """Start the HTTP handler so the sync can be triggered by a request."""
    from .handler import create_app
    import uvicorn

    console.print(f"[green]Starting sync server on {host}:{port}[/green]")
    console.print(f"[blue]Sync endpoint: http://{host}:{port}/api/sync[/blue]")

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    app()
