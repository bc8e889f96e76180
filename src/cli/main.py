"""Main CLI entry point for the session idle nudge watchdog."""

import logging
from pathlib import Path

import typer
from rich.console import Console

from src.cli.commands.check_transcript import check_transcript_command
from src.cli.commands.init import init_command
from src.cli.commands.policy import policy_command
from src.cli.commands.sweep import sweep_command
from src.cli.commands.watch import watch_command

app = typer.Typer(
    name="idle-nudge",
    help="Idle session watchdog - nudges background agent sessions that went quiet",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@app.command("init")
def init(
    session_store: Path = typer.Option(..., "-s", "--session-store", help="Session store JSON file"),
    sessions_dir: Path = typer.Option(None, "-d", "--sessions-dir", help="Transcript directory"),
    dispatch_method: str = typer.Option("noop", "-m", "--dispatch", help="webhook, subprocess or noop"),
    dispatch_target: str = typer.Option("", "-t", "--target", help="Webhook URL or command template"),
    force: bool = typer.Option(False, "-f", "--force", help="Overwrite config"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Write the watchdog configuration file."""
    init_command(session_store, sessions_dir, dispatch_method, dispatch_target, force, json_flag)


@app.command("sweep")
def sweep(
    force: bool = typer.Option(False, "-f", "--force", help="Ignore the sweep throttle"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List idle sessions without nudging"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Sweep the session store once and nudge idle sessions."""
    sweep_command(force, dry_run, json_flag)


@app.command("watch")
def watch(
    interval: float = typer.Option(None, "-i", "--interval", help="Seconds between sweeps"),
) -> None:
    """Sweep on a timer until interrupted."""
    watch_command(interval)


@app.command("check-transcript")
def check_transcript(
    session_id: str = typer.Argument(..., help="Session ID"),
    sessions_dir: Path = typer.Option(..., "-d", "--sessions-dir", help="Transcript directory"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Report whether a session transcript ended with END."""
    check_transcript_command(session_id, sessions_dir, json_flag)


@app.command("policy")
def policy(
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the resolved idle nudge policy."""
    policy_command(json_flag)


def main() -> None:
    """Entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
        raise typer.Exit(130)
