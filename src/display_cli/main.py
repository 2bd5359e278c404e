"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
import time
from enum import StrEnum
from typing import Any

import structlog
import typer
from pydantic import BaseModel
from rich.console import Console

from display_client.factories import build_services
from display_client.observability import bind_screen_context, configure_logging
from display_core.config.settings import Settings
from display_core.models.result import ApiResult

app = typer.Typer(
    name="masjid-display",
    help="Resilient data client for masjid display screens",
)
console = Console()
logger = structlog.get_logger()


class Resource(StrEnum):
    """Fetchable screen resources."""

    CONTENT = "content"
    PRAYER_TIMES = "prayer-times"
    PRAYER_STATUS = "prayer-status"
    EVENTS = "events"
    SYNC = "sync"


def _load_settings(verbose: bool) -> Settings:
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return settings


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return data


def _print_result(result: ApiResult[Any]) -> int:
    """Render a result and return the process exit code."""
    if not result.success:
        status = f" (HTTP {result.status_code})" if result.status_code else ""
        console.print(f"[red]Error:[/red] {result.error}{status}")
        return 1
    if result.from_cache:
        console.print("[yellow]Served from offline cache[/yellow]")
    console.print_json(data=_jsonable(result.data))
    return 0


async def _pair(settings: Settings, interval: float, timeout: float) -> int:
    async with build_services(settings) as services:
        client = services.client
        code_result = await client.request_pairing_code()
        if not code_result.success:
            return _print_result(code_result)

        code = code_result.data.pairing_code
        console.print(
            f"Pairing code: [bold cyan]{code}[/bold cyan] "
            f"[dim](expires {code_result.data.expires_at})[/dim]"
        )

        deadline = time.monotonic() + timeout
        while True:
            status = await client.check_pairing_status(code)
            if status.success and status.data.is_paired:
                break
            if time.monotonic() >= deadline:
                console.print("[red]Error:[/red] Pairing timed out")
                return 1
            await asyncio.sleep(interval)

        creds = await client.get_paired_credentials(code)
        if creds.success:
            bind_screen_context(creds.data.screen_id, creds.data.masjid_id or None)
            console.print(f"[bold green]Paired[/bold green] as screen {creds.data.screen_id}")
        return _print_result(creds)


async def _fetch(
    settings: Settings, resource: Resource, date: str | None, limit: int | None
) -> int:
    async with build_services(settings) as services:
        client = services.client
        if resource is Resource.CONTENT:
            result = await client.get_content()
        elif resource is Resource.PRAYER_TIMES:
            result = await client.get_prayer_times(date)
        elif resource is Resource.PRAYER_STATUS:
            result = await client.get_prayer_status()
        elif resource is Resource.EVENTS:
            result = await client.get_events(limit)
        else:
            result = await client.get_sync_status()
        return _print_result(result)


async def _heartbeat(settings: Settings) -> int:
    async with build_services(settings) as services:
        if not services.client.is_authenticated():
            console.print("[red]Error:[/red] Not authenticated; run `pair` first")
            return 1
        result = await services.scheduler.send_heartbeat_once()
        if result is None:
            console.print("[yellow]Heartbeat skipped (offline)[/yellow]")
            return 1
        return _print_result(result)


async def _status(settings: Settings) -> int:
    async with build_services(settings) as services:
        reachable = await services.network.check_reachability()
        status = services.network.status
        console.print(f"  Online: {status.is_online}")
        console.print(f"  API reachable: {status.is_api_reachable}")
        console.print(f"  Last checked: {status.last_checked}")
        console.print(f"  Paired: {services.client.is_authenticated()}")
        return 0 if reachable else 1


async def _clear_cache(settings: Settings) -> int:
    async with build_services(settings) as services:
        await services.client.clear_cache()
    console.print("[green]Cache cleared[/green]")
    return 0


async def _run(settings: Settings) -> None:
    async with build_services(settings) as services:
        screen_id = services.credentials.get_screen_id()
        if screen_id:
            bind_screen_context(screen_id, services.credentials.get_masjid_id())
        await services.network.start()
        services.scheduler.start()
        logger.info("display_sync_running", api_url=settings.api_url, paired=bool(screen_id))
        await asyncio.Event().wait()


@app.command()
def pair(
    interval: float = typer.Option(5.0, "--interval", help="Seconds between status checks"),
    timeout: float = typer.Option(600.0, "--timeout", help="Give up after this many seconds"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Pair this screen: show a code, wait for an admin, store credentials."""
    settings = _load_settings(verbose)
    code = asyncio.run(_pair(settings, interval, timeout))
    if code:
        raise typer.Exit(code=code)


@app.command()
def fetch(
    resource: Resource = typer.Argument(..., help="Resource to fetch"),
    date: str | None = typer.Option(None, "--date", help="Prayer times date (YYYY-MM-DD)"),
    limit: int | None = typer.Option(None, "--limit", help="Maximum events"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Fetch one resource through the cache and print it as JSON."""
    settings = _load_settings(verbose)
    code = asyncio.run(_fetch(settings, resource, date, limit))
    if code:
        raise typer.Exit(code=code)


@app.command()
def heartbeat(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Send a single heartbeat."""
    settings = _load_settings(verbose)
    code = asyncio.run(_heartbeat(settings))
    if code:
        raise typer.Exit(code=code)


@app.command()
def status(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Probe API reachability once."""
    settings = _load_settings(verbose)
    code = asyncio.run(_status(settings))
    if code:
        raise typer.Exit(code=code)


@app.command("clear-cache")
def clear_cache(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Remove every cached API response."""
    settings = _load_settings(verbose)
    asyncio.run(_clear_cache(settings))


@app.command()
def run(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Run the network observer and sync scheduler until interrupted."""
    settings = _load_settings(verbose)
    console.print(f"[bold green]Syncing from[/bold green] {settings.api_url}")
    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")


if __name__ == "__main__":
    app()
