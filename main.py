#!/usr/bin/env python3
"""
Visa Appointment Slot Watcher - Main Entry Point

Usage:
    python main.py --config config/config.yaml run
    python main.py --config config/config.yaml check
    python main.py info
"""
import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from slotwatch.common.config import load_config
from slotwatch.common.models import ScanStatus

console = Console()

STATUS_STYLES = {
    ScanStatus.SLOTS: "green",
    ScanStatus.EMPTY: "yellow",
    ScanStatus.UNAUTHENTICATED: "red",
    ScanStatus.MALFORMED: "red",
    ScanStatus.FETCH_FAILED: "red",
}


def setup_logging(level: str = "INFO", log_file: str = None):
    """Configure logging"""
    handlers = [RichHandler(console=console, rich_tracebacks=True)]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=handlers
    )


@click.group()
@click.option("--config", "-c", default=None, help="Path to config file (default: search, then environment)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, config, verbose):
    """
    Visa Appointment Slot Watcher

    Polls every facility for an appointment date earlier than the one you hold.
    """
    ctx.ensure_object(dict)

    try:
        cfg = load_config(config)
        ctx.obj["config"] = cfg
        setup_logging(
            level="DEBUG" if verbose else cfg.logging.level,
            log_file=cfg.logging.file
        )
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.pass_context
def run(ctx):
    """Poll until the configured number of cycles is used up"""
    from slotwatch.browser import SlotWatchBot, LoginError

    cfg = ctx.obj["config"]

    async def _run():
        async with SlotWatchBot(cfg) as bot:
            return await bot.run()

    console.print(Panel(
        f"👀 Watching for dates before {cfg.polling.threshold_date.isoformat()}\n\n"
        f"Facilities: {cfg.site.first_facility_id}-{cfg.site.last_facility_id}\n"
        f"Max cycles: {cfg.polling.max_tries}\n\n"
        f"Press Ctrl+C to stop",
        style="blue"
    ))

    try:
        state = asyncio.run(_run())
    except LoginError as e:
        logging.getLogger(__name__).error(f"Giving up: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        return

    console.print(f"[green]Done after {state.cycle} cycle(s)[/green]")


@cli.command()
@click.pass_context
def check(ctx):
    """Run a single poll cycle and show what each facility offers"""
    from slotwatch.browser import SlotWatchBot, LoginError

    cfg = ctx.obj["config"]

    async def _check():
        async with SlotWatchBot(cfg) as bot:
            return await bot.check_once()

    try:
        state = asyncio.run(_check())
    except LoginError as e:
        console.print(f"[red]Login failed: {e}[/red]")
        sys.exit(1)

    threshold = cfg.polling.threshold
    table = Table(title="Facility Availability")
    table.add_column("Facility")
    table.add_column("Status")
    table.add_column("Earliest")
    table.add_column("Beats threshold")

    for result in state.results:
        style = STATUS_STYLES[result.status]
        earliest = result.earliest
        table.add_row(
            str(result.facility_id),
            f"[{style}]{result.status.value}[/{style}]",
            earliest.isoformat() if earliest else "-",
            "✓" if threshold.is_beaten_by(earliest) else "",
        )

    console.print(table)


@cli.command()
@click.pass_context
def info(ctx):
    """Show current configuration"""
    cfg = ctx.obj["config"]

    console.print(Panel("📋 Current Configuration", style="blue"))

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Email", cfg.credentials.email)
    table.add_row("Password", "*" * 8)
    table.add_row("Site", f"{cfg.site.base_url}/{cfg.site.country_code}")
    table.add_row("Schedule ID", cfg.site.schedule_id)
    table.add_row("Facilities", f"{cfg.site.first_facility_id}-{cfg.site.last_facility_id}")
    table.add_row("Notify Before", cfg.polling.threshold_date.isoformat())
    table.add_row("Max Cycles", str(cfg.polling.max_tries))
    table.add_row("Active / Idle Delay", f"{cfg.polling.active_delay_ms}ms / {cfg.polling.idle_delay_ms}ms")
    email = cfg.notifications.email
    table.add_row("Email Alerts", ", ".join(email.addresses) if email.enabled else "disabled")
    table.add_row("Headless Mode", str(cfg.browser.headless))

    console.print(table)


if __name__ == "__main__":
    cli()
