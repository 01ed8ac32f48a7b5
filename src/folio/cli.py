"""
Main CLI dispatcher for folio.

Usage:
    folio init                              # Initialize .folio/ directory
    folio analytics [summary|stats|timeline|feed|distribution]
    folio messages [unread|watch]
    folio config [show|get|set|reset|path]
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from folio import __version__

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route logging through rich; folio's own loggers go to DEBUG with -v.

    The root logger stays at WARNING so third-party debug output (asyncio,
    urllib3) never reaches the terminal.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )
    logging.getLogger("folio").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="folio")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """Portfolio content tools.

    Analytics and unread-message tracking over the portfolio content API.
    """
    configure_logging(verbose)


@main.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing config file")
@click.option("--api-url", default=None, help="Content API root URL to store")
def init(force: bool, api_url: str | None) -> None:
    """Initialize .folio/ directory in the current directory.

    Creates .folio/config.yaml so settings apply to this workspace.
    """
    from pathlib import Path

    import yaml

    from folio.core.config import DEFAULT_API_URL

    folio_dir = Path.cwd() / ".folio"
    config_file = folio_dir / "config.yaml"

    if config_file.exists() and not force:
        console.print(f"[yellow].folio/ already initialized at {folio_dir}[/yellow]")
        console.print("[dim]Use --force to reinitialize.[/dim]")
        return

    folio_dir.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        yaml.dump({"api": {"base_url": api_url or DEFAULT_API_URL}}, default_flow_style=False)
    )
    console.print(f"  [green]Created[/green] {config_file}")

    # Keep tokens out of version control
    gitignore_path = Path.cwd() / ".gitignore"
    gitignore_entry = ".folio/"
    if gitignore_path.exists():
        content = gitignore_path.read_text()
        if gitignore_entry not in content:
            with open(gitignore_path, "a") as f:
                f.write(f"\n# folio settings\n{gitignore_entry}\n")
            console.print(f"  [green]Updated[/green] .gitignore with {gitignore_entry}")

    console.print()
    console.print("[green]Done![/green] Set a token with 'folio config set api.token <token>'.")


# Import and register command groups (imports after main definition intentional)
from folio.analytics.commands import analytics  # noqa: E402
from folio.config.commands import config  # noqa: E402
from folio.messages.commands import messages  # noqa: E402

main.add_command(analytics)
main.add_command(messages)
main.add_command(config)


if __name__ == "__main__":
    main()
