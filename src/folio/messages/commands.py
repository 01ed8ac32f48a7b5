"""CLI commands for inbound contact messages."""

from __future__ import annotations

import asyncio
import json as json_module
from datetime import datetime

import click
from rich.console import Console

from folio.content.gateway import ContentAPIClient
from folio.core.auth import AuthSignal
from folio.core.config import load_settings
from folio.messages.unread import UnreadCounter, UnreadSynchronizer

console = Console()


def _client_for(settings) -> ContentAPIClient:
    return ContentAPIClient(settings.api_url, token=settings.api_token, timeout=settings.timeout)


@click.group(name="messages")
def messages() -> None:
    """Inbound contact messages.

    Tracks how many messages are still unread.
    """
    pass


@messages.command(name="unread")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def messages_unread(as_json: bool) -> None:
    """Show the number of unread messages.

    \b
    Examples:
        folio messages unread          # Print the count
        folio messages unread --json   # JSON output
    """
    settings = load_settings()
    if not settings.is_authenticated:
        console.print("[red]No API token configured.[/red]")
        console.print("[dim]Set FOLIO_API_TOKEN or 'folio config set api.token <token>'.[/dim]")
        raise SystemExit(1)

    client = _client_for(settings)
    counter = UnreadCounter()
    auth = AuthSignal(is_authenticated=True, is_loading=False)
    synchronizer = UnreadSynchronizer(client, counter, auth)

    try:
        synced = asyncio.run(synchronizer.sync_once())
    finally:
        client.close()

    if not synced:
        console.print("[red]Could not fetch messages from the content API.[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(json_module.dumps({"unread": counter.count}))
        return

    style = "yellow" if counter.count else "green"
    console.print(f"Unread messages: [bold {style}]{counter.count}[/bold {style}]")


@messages.command(name="watch")
@click.option("--interval", "-i", type=float, default=None,
              help="Seconds between polls (default from config)")
@click.option("--duration", "-d", type=float, default=None,
              help="Stop after this many seconds (default: until Ctrl+C)")
def messages_watch(interval: float | None, duration: float | None) -> None:
    """Poll the unread count and print every change.

    \b
    Examples:
        folio messages watch                 # Poll every 30s until Ctrl+C
        folio messages watch -i 5 -d 60      # Poll every 5s for a minute
    """
    settings = load_settings()
    if not settings.is_authenticated:
        console.print("[red]No API token configured.[/red]")
        raise SystemExit(1)

    poll_interval = interval if interval is not None else settings.poll_interval
    client = _client_for(settings)

    def report(count: int) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{stamp}[/dim] unread messages: [bold]{count}[/bold]")

    async def run() -> None:
        counter = UnreadCounter()
        auth = AuthSignal()
        synchronizer = UnreadSynchronizer(client, counter, auth, interval=poll_interval)
        unsubscribe = counter.subscribe(report)

        synchronizer.attach()
        auth.login()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            unsubscribe()
            await synchronizer.close()

    console.print(f"[cyan]Watching unread messages every {poll_interval:g}s...[/cyan]")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    finally:
        client.close()
    console.print("[dim]Stopped.[/dim]")
