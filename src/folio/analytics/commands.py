"""CLI commands for content analytics."""

from __future__ import annotations

import asyncio
import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from folio.analytics.timeline import TimeRange
from folio.content.models import ContentKind

console = Console()

RANGE_CHOICES = [r.value for r in TimeRange]


def _refresh(time_range: str | None, feed_limit: int | None = None, as_json: bool = False):
    """Fetch everything once and return the snapshot, exiting on total failure."""
    from folio.analytics import ContentAnalytics
    from folio.content.gateway import ContentAPIClient
    from folio.core.config import load_settings

    settings = load_settings()
    client = ContentAPIClient(settings.api_url, token=settings.api_token, timeout=settings.timeout)
    analytics = ContentAnalytics(
        client,
        feed_limit=feed_limit if feed_limit is not None else settings.feed_limit,
        time_range=time_range or settings.default_range,
    )

    try:
        snapshot = asyncio.run(analytics.refresh())
    finally:
        client.close()

    if snapshot is None:
        console.print(f"[red]{analytics.error or 'No analytics data available'}[/red]")
        console.print(f"[dim]API: {settings.api_url}[/dim]")
        raise SystemExit(1)

    # JSON output carries failures in its own "failures" key
    if not as_json:
        for kind, message in snapshot.failures.items():
            console.print(f"[yellow]Could not load {kind.value} collection: {message}[/yellow]")

    return snapshot


@click.group(name="analytics")
def analytics() -> None:
    """Content analytics and insights.

    Provides counts, activity timelines and the recent-activity feed.
    """
    pass


@analytics.command(name="stats")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def analytics_stats(as_json: bool) -> None:
    """Show counts per collection and derived metrics.

    \b
    Examples:
        folio analytics stats          # Table of counts and metrics
        folio analytics stats --json   # JSON output
    """
    snapshot = _refresh(None, as_json=as_json)
    stats = snapshot.stats

    if as_json:
        click.echo(json_module.dumps(stats.to_dict(), indent=2))
        return

    table = Table(title="Content Collections")
    table.add_column("Collection", style="cyan")
    table.add_column("Count", style="bold")
    for kind, count in stats.counts_by_kind.items():
        table.add_row(kind.value, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{stats.total}[/bold]")
    console.print(table)

    metrics = Table(title="Derived Metrics")
    metrics.add_column("Metric", style="cyan")
    metrics.add_column("Value", style="green")
    for name, value in stats.derived_metrics.items():
        metrics.add_row(name.replace("_", " "), str(value))
    console.print(metrics)


@analytics.command(name="timeline")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--range", "-r", "time_range", type=click.Choice(RANGE_CHOICES), default=None,
              help="Time window (default from config)")
@click.option("--monthly", is_flag=True, help="Show the last 6 months instead of days")
@click.option("--active-only", is_flag=True, help="Hide days without any activity")
def analytics_timeline(
    as_json: bool,
    time_range: str | None,
    monthly: bool,
    active_only: bool,
) -> None:
    """Show content activity over time.

    Counts projects, blog posts, messages and testimonials created per day.

    \b
    Examples:
        folio analytics timeline                # Default window, per day
        folio analytics timeline --range 7d     # Last 7 days
        folio analytics timeline --monthly      # Last 6 months
        folio analytics timeline --json         # JSON output
    """
    snapshot = _refresh(time_range, as_json=as_json)
    buckets = snapshot.monthly if monthly else snapshot.timeline
    if active_only:
        buckets = [b for b in buckets if b.total > 0]

    if as_json:
        click.echo(json_module.dumps([b.to_dict() for b in buckets], indent=2))
        return

    if not buckets:
        console.print("[yellow]No activity in this window.[/yellow]")
        return

    kinds = list(buckets[0].counts_by_kind)
    title = "Monthly Activity" if monthly else f"Activity Timeline ({snapshot.time_range.value})"
    table = Table(title=title)
    table.add_column("Month" if monthly else "Day", style="cyan")
    for kind in kinds:
        table.add_column(kind.value.capitalize() + "s")
    table.add_column("Total", style="bold")

    totals = {kind: 0 for kind in kinds}
    for bucket in buckets:
        row = [bucket.label]
        for kind in kinds:
            row.append(str(bucket.count(kind)))
            totals[kind] += bucket.count(kind)
        row.append(str(bucket.total))
        table.add_row(*row)

    # Add totals row
    table.add_row(
        "[bold]Total[/bold]",
        *[f"[bold]{totals[kind]}[/bold]" for kind in kinds],
        f"[bold]{sum(totals.values())}[/bold]",
    )
    console.print(table)


@analytics.command(name="feed")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--limit", "-n", type=int, default=None, help="Maximum number of events")
@click.option("--dashboard", is_flag=True, help="Use the dashboard feed length")
def analytics_feed(as_json: bool, limit: int | None, dashboard: bool) -> None:
    """Show the recent-activity feed.

    Each collection contributes its latest few items, then everything is
    ranked by time.

    \b
    Examples:
        folio analytics feed              # Analytics view (10 events)
        folio analytics feed --dashboard  # Dashboard view (5 events)
        folio analytics feed -n 3 --json  # JSON output
    """
    from folio.analytics.feed import format_time_ago
    from folio.core.config import load_settings

    if limit is None and dashboard:
        limit = load_settings().dashboard_feed_limit

    snapshot = _refresh(None, feed_limit=limit, as_json=as_json)
    feed = snapshot.feed

    if as_json:
        click.echo(json_module.dumps([e.to_dict() for e in feed], indent=2))
        return

    if not feed:
        console.print("[yellow]No recent activity.[/yellow]")
        return

    table = Table(title="Recent Activity")
    table.add_column("When", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Who", style="green")
    table.add_column("What")
    table.add_column("Detail", style="dim")

    for event in feed:
        what = escape(event.description)
        if event.read is False:
            what += " [bold yellow](unread)[/bold yellow]"
        detail = event.detail[:40] + "..." if len(event.detail) > 40 else event.detail
        table.add_row(
            format_time_ago(event.timestamp, snapshot.generated_at),
            event.kind.value,
            escape(event.actor),
            what,
            escape(detail),
        )

    console.print(table)


@analytics.command(name="distribution")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def analytics_distribution(as_json: bool) -> None:
    """Show skills and achievements grouped by category.

    \b
    Examples:
        folio analytics distribution
        folio analytics distribution --json
    """
    snapshot = _refresh(None, as_json=as_json)
    distributions = snapshot.stats.distributions

    if as_json:
        output = {name: dist.to_dict() for name, dist in distributions.items()}
        click.echo(json_module.dumps(output, indent=2))
        return

    for name, dist in distributions.items():
        if not dist.counts:
            console.print(f"[dim]{name.replace('_', ' ')}: no entries[/dim]")
            continue

        table = Table(title=name.replace("_", " ").capitalize())
        table.add_column("Category", style="cyan")
        table.add_column("Count", style="bold")
        table.add_column("Share", style="green")
        for category, count in sorted(dist.counts.items(), key=lambda x: x[1], reverse=True):
            table.add_row(escape(category), str(count), f"{dist.percentage(category):.0f}%")
        console.print(table)


@analytics.command(name="summary")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--range", "-r", "time_range", type=click.Choice(RANGE_CHOICES), default=None,
              help="Time window (default from config)")
def analytics_summary(as_json: bool, time_range: str | None) -> None:
    """Show full analytics overview.

    \b
    Examples:
        folio analytics summary              # Full overview
        folio analytics summary --range 90d  # Recency over 90 days
        folio analytics summary --json       # JSON output
    """
    snapshot = _refresh(time_range, as_json=as_json)

    if as_json:
        click.echo(json_module.dumps(snapshot.to_dict(), indent=2))
        return

    stats = snapshot.stats
    metrics = stats.derived_metrics

    # Content overview
    console.print()
    console.print("[bold cyan]Content Overview[/bold cyan]")
    console.print(f"  Total items: {stats.total}")
    for kind, count in stats.counts_by_kind.items():
        console.print(f"    {kind.value}: {count}")

    console.print()
    console.print("[bold cyan]Highlights[/bold cyan]")
    console.print(
        f"  Blog posts: {metrics['published_blogs']} published, {metrics['draft_blogs']} drafts"
    )
    console.print(f"  Unread messages: {metrics['unread_messages']}")
    console.print(f"  Featured projects: {metrics['featured_projects']}")

    # Performance over the window
    console.print()
    console.print(f"[bold cyan]Added in the last {snapshot.time_range.value}[/bold cyan]")
    for row in snapshot.performance:
        console.print(f"  {row.category}: {row.recent} of {row.total}")

    if snapshot.top_content:
        console.print()
        console.print("[bold cyan]Top Content[/bold cyan]")
        for row in snapshot.top_content:
            flag = "featured" if row.kind is ContentKind.PROJECT else "published"
            mark = f" [green]({flag})[/green]" if row.highlighted else ""
            noun = "technologies" if row.kind is ContentKind.PROJECT else "tags"
            console.print(
                f"  {row.created_at:%Y-%m-%d}  {row.kind.value}: {escape(row.title)}{mark}"
                f" [dim]{row.tag_count} {noun}[/dim]"
            )

    if snapshot.message_stats:
        console.print()
        console.print("[bold cyan]Messages by Day[/bold cyan]")
        for day in snapshot.message_stats[-7:]:
            console.print(f"  {day.label}: {day.count}")

    if snapshot.recent_messages:
        console.print()
        console.print("[bold cyan]Recent Messages[/bold cyan]")
        for message in snapshot.recent_messages:
            status = "[dim]read[/dim]" if message.read else "[bold yellow]unread[/bold yellow]"
            console.print(f"  {escape(message.name)} <{escape(message.email)}> {status}")
            if message.excerpt:
                console.print(f"    [dim]{escape(message.excerpt)}[/dim]")

    # Recent activity
    if snapshot.feed:
        console.print()
        console.print("[bold cyan]Recent Activity[/bold cyan]")
        for event in snapshot.feed[:5]:
            console.print(f"  {escape(event.actor)} {escape(event.description)}")

    console.print()
