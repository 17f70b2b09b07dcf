# ticket_hawk/cli/runner.py

"""Pipeline runner: search, persist, and summarise event prices."""

import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ticket_hawk.clients.errors import ApiError, ConfigError, NetworkError
from ticket_hawk.clients.ticketmaster_client import (
    TicketmasterClient,
    describe_event,
    map_to_event,
    map_to_price_snapshot,
)
from ticket_hawk.config.settings import Settings
from ticket_hawk.models.price_snapshot import PriceSnapshot
from ticket_hawk.storage.event_db import EventDB

logger = logging.getLogger("ticket_hawk.cli")

# Stderr console for progress so stdout carries only the result tables
_err = Console(stderr=True)

def _format_price(snapshot: PriceSnapshot) -> str:
    """Render a snapshot's price range, or a placeholder when absent."""
    if snapshot.min_price is None:
        return "No price available"
    return (
        f"${snapshot.min_price} - ${snapshot.max_price} "
        f"{snapshot.currency}"
    )


def _print_snapshots(
    title: str, snapshots: list[PriceSnapshot],
) -> None:
    """Render a Rich table of price snapshots to stdout."""
    table = Table(
        title=title,
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Checked at")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Availability", justify="center")

    for idx, snap in enumerate(snapshots, 1):
        checked = (
            snap.checked_at.strftime("%Y-%m-%d %H:%M:%S")
            if snap.checked_at
            else "—"
        )
        table.add_row(
            str(idx),
            checked,
            _format_price(snap),
            snap.availability.value,
        )

    Console().print(table)


def _report_error(exc: Exception) -> None:
    """Log a pipeline failure with whatever context the error carries."""
    if isinstance(exc, ApiError):
        logger.error(
            "Ticketmaster API responded %d: %s",
            exc.status,
            exc.message,
        )
    elif isinstance(exc, (ConfigError, NetworkError)):
        logger.error("%s: %s", type(exc).__name__, exc)
    else:
        logger.error(
            "Pipeline failed: %s", exc, exc_info=True,
        )
    _err.print(f"[red]Error: {escape(str(exc))}[/red]")


def run_demo(
    keyword: str = "concert",
    city: str | None = "Toronto",
    snapshot_limit: int = 5,
    db_path: Path | None = None,
    client: TicketmasterClient | None = None,
) -> int:
    """Run one search → persist → report pass. Returns an exit code."""
    db: EventDB | None = None
    owned_client: TicketmasterClient | None = None
    try:
        _err.print("[bold]Step 1:[/bold] Validating configuration...")
        if client is None:
            Settings.validate()
            client = owned_client = TicketmasterClient(
                Settings.TICKETMASTER_API_KEY,
            )

        _err.print("[bold]Step 2:[/bold] Opening database...")
        db = EventDB(db_path)

        _err.print(
            f"[bold]Step 3:[/bold] Searching for [cyan]{keyword}[/cyan]"
            + (f" in [cyan]{city}[/cyan]" if city else "")
            + "..."
        )
        events = client.search_events(keyword, city)
        if not events:
            logger.warning(
                "No events found for %r in %s", keyword, city,
            )
            _err.print(
                "[yellow]No events found. Try a different "
                "search term or city.[/yellow]"
            )
            return 0
        _err.print(f"[green]✓ Found {len(events)} events[/green]")

        first = events[0]
        for line in describe_event(first):
            _err.print(f"  {line}")

        _err.print("[bold]Step 4:[/bold] Fetching event details...")
        details = client.get_event_details(str(first.get("id", "")))
        if details is None:
            _err.print("[yellow]Could not fetch event details.[/yellow]")
            return 0

        _err.print("[bold]Step 5:[/bold] Saving event...")
        parsed = map_to_event(details)
        existing = db.get_event_by_external_id(parsed.external_id)
        if existing is not None and existing.id is not None:
            event_id = existing.id
            _err.print(
                f"[dim]Event already tracked (ID: {event_id})[/dim]"
            )
        else:
            event_id = db.add_event(parsed)
            _err.print(f"[green]✓ Event added (ID: {event_id})[/green]")

        _err.print("[bold]Step 6:[/bold] Recording price snapshot...")
        snapshot = map_to_price_snapshot(details, event_id)
        snapshot_id = db.add_price_snapshot(snapshot)
        _err.print(
            f"[green]✓ Price snapshot recorded (ID: {snapshot_id})[/green]"
        )

        _err.print("[bold]Step 7:[/bold] Reading recent snapshots...")
        recent = db.get_recent_snapshots(event_id, snapshot_limit)
        _print_snapshots(f"Recent snapshots: {parsed.name}", recent)

        _err.print(
            f"[green]✓ Done[/green]  [dim]db={db.path}  "
            f"event={parsed.name}  date={parsed.event_date}  "
            f"snapshots={len(recent)}[/dim]"
        )
        return 0
    except Exception as exc:
        _report_error(exc)
        return 1
    finally:
        if db is not None:
            db.close()
        if owned_client is not None:
            owned_client.close()


def run_tracked(db_path: Path | None = None) -> int:
    """Print every active event together with its latest snapshot."""
    try:
        with EventDB(db_path) as db:
            events = db.get_active_events()
            if not events:
                _err.print("[yellow]No tracked events.[/yellow]")
                return 0

            table = Table(
                title="Tracked Events",
                show_lines=True,
                title_style="bold cyan",
            )
            table.add_column("ID", style="dim", width=4)
            table.add_column("Event", max_width=50)
            table.add_column("Date")
            table.add_column("Venue", style="magenta")
            table.add_column("Latest price", justify="right", style="green")
            table.add_column("Availability", justify="center")

            for event in events:
                latest = (
                    db.get_latest_snapshot(event.id)
                    if event.id is not None
                    else None
                )
                venue = ", ".join(
                    part for part in (event.venue, event.city) if part
                )
                table.add_row(
                    str(event.id),
                    event.name,
                    event.event_date,
                    venue or "—",
                    _format_price(latest) if latest else "—",
                    latest.availability.value if latest else "—",
                )

            Console().print(table)
            return 0
    except Exception as exc:
        _report_error(exc)
        return 1


def run_health_check(client: TicketmasterClient | None = None) -> int:
    """Probe the Discovery API and print its status."""
    from ticket_hawk.services.health_checker import probe_api

    owned_client: TicketmasterClient | None = None
    try:
        if client is None:
            Settings.validate()
            client = owned_client = TicketmasterClient(
                Settings.TICKETMASTER_API_KEY,
            )
    except ConfigError as exc:
        _report_error(exc)
        return 1

    _err.print("[bold]Running API health check...[/bold]")
    try:
        result = probe_api(client)
    finally:
        if owned_client is not None:
            owned_client.close()

    table = Table(
        title="Discovery API Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Endpoint", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ OK[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    latency = (
        f"{result.latency_ms:.0f}ms" if result.latency_ms > 0 else "—"
    )
    table.add_row(result.endpoint, status, latency, result.message)
    Console().print(table)
    return 1 if result.status == "down" else 0
