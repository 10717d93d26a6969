"""Operator CLI: run the API and inspect stored state."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
import json
import sys
from typing import Any, TypeVar

from redis.asyncio import Redis
from rich.console import Console
from rich.table import Table
import typer

from .config import get_settings
from .lifecycle import LifecycleManager
from .logging_config import setup_logging
from .storage import RedisClient, WebhookEventLog

T = TypeVar("T")

app = typer.Typer(
    name="marketplace-integration",
    help="Entrolytics Vercel integration backend",
    add_completion=False,
)
console = Console()


@app.callback()
def callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    """Entrolytics Vercel integration backend."""
    setup_logging(
        log_format="console",
        log_level="DEBUG" if verbose else "WARNING",
        stream=sys.stderr,
    )


async def _with_redis(action: Callable[[Redis], Awaitable[T]]) -> T:
    client = RedisClient(get_settings().redis_url)
    await client.connect()
    try:
        return await action(client.redis)
    finally:
        await client.close()


def _run(action: Callable[[Redis], Awaitable[T]]) -> T:
    try:
        return asyncio.run(_with_redis(action))
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from None


def _format_ms(value: int | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),  # noqa: S104
    port: int = typer.Option(8000, "--port", "-p"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the integration API with uvicorn."""
    import uvicorn

    uvicorn.run("marketplace_integration.api.main:app", host=host, port=port, reload=reload)


@app.command()
def installations(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List active installations, most recent first."""

    async def load(redis: Redis):
        return await LifecycleManager.from_settings(redis, get_settings()).list_installations()

    items = _run(load)
    if json_output:
        _echo_json([json.loads(i.to_json()) for i in items])
        return

    table = Table(title=f"Installations ({len(items)})")
    table.add_column("ID", style="cyan")
    table.add_column("Plan")
    table.add_column("Type")
    table.add_column("Team")
    table.add_column("Created")
    for item in items:
        table.add_row(
            item.installation_id,
            item.billing_plan_id,
            item.type.value,
            item.credentials.team_id or "-",
            _format_ms(item.created_at),
        )
    console.print(table)


@app.command()
def resources(
    installation_id: str = typer.Argument(..., help="Installation (configuration) id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List resources provisioned for an installation."""

    async def load(redis: Redis):
        lifecycle = LifecycleManager.from_settings(redis, get_settings())
        return await lifecycle.list_resources(installation_id)

    items = _run(load)
    if json_output:
        _echo_json([json.loads(r.to_json()) for r in items])
        return

    table = Table(title=f"Resources for {installation_id} ({len(items)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Plan")
    table.add_column("Website")
    table.add_column("Project")
    for item in items:
        metadata = item.metadata
        table.add_row(
            item.id,
            item.name,
            item.status.value,
            item.billing_plan.id,
            (metadata.website_id if metadata else None) or "-",
            (metadata.project_id if metadata else None) or "-",
        )
    console.print(table)


@app.command()
def events(
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of events"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the most recent webhook deliveries from the audit trail."""

    async def load(redis: Redis):
        return await WebhookEventLog(redis).recent(limit)

    items = _run(load)
    if json_output:
        _echo_json(items)
        return

    table = Table(title="Webhook events")
    table.add_column("ID", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Created")
    for item in items:
        table.add_row(str(item.get("id")), str(item.get("type")), _format_ms(item.get("createdAt")))
    console.print(table)


if __name__ == "__main__":
    app()
