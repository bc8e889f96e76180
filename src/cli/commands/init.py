"""Write the watchdog configuration file."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from src.cli.output import format_error, format_success, json_output
from src.cli.utils import ConfigManager, validate_dispatch

console = Console()


def init_command(
    session_store: Path,
    sessions_dir: Optional[Path],
    dispatch_method: str,
    dispatch_target: str,
    force: bool,
    json_flag: bool,
) -> None:
    """Create ~/.idle-nudge/config.yaml with idle nudging enabled at defaults."""
    try:
        dispatch_method, dispatch_target = validate_dispatch(dispatch_method, dispatch_target)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    config = ConfigManager()

    if config.exists() and not force:
        format_error(
            console,
            f"Configuration already exists at {config.config_path}",
            hint="Use --force to overwrite existing configuration",
        )
        raise typer.Exit(code=1)

    config.save(session_store, sessions_dir, dispatch_method, dispatch_target)

    if json_flag:
        json_output(
            console,
            {
                "status": "initialized",
                "session_store": str(session_store),
                "sessions_dir": str(sessions_dir) if sessions_dir else None,
                "dispatch_method": dispatch_method,
                "config_path": str(config.config_path),
            },
        )
    else:
        format_success(console, "Watchdog configured successfully")
        console.print(f"[cyan]Session store:[/cyan] {session_store}")
        console.print(f"[cyan]Transcripts:[/cyan]   {sessions_dir or '-'}")
        console.print(f"[cyan]Dispatch:[/cyan]      {dispatch_method}")
        console.print(f"[cyan]Config:[/cyan]        {config.config_path}")
