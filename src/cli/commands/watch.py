"""Run the idle sweep on a timer until interrupted."""

import asyncio
from dataclasses import replace
from typing import Optional

import typer
from rich.console import Console

from src.cli.output import format_error, format_warning
from src.cli.utils import ConfigManager, validate_dispatch, validate_interval
from src.cli.utils.config import ConfigError
from src.server.app import serve

console = Console()


def watch_command(interval: Optional[float]) -> None:
    """Sweep every ``interval`` seconds (default from config) until Ctrl-C."""
    try:
        config = ConfigManager().load()
        validate_dispatch(config.dispatch.method, config.dispatch.target)
        if interval is not None:
            config = replace(config, interval_seconds=validate_interval(interval))
    except (ConfigError, ValueError) as e:
        format_error(console, str(e))
        raise typer.Exit(code=1)

    if config.policy is None:
        format_warning(console, "Idle nudging is disabled (agents.defaults.idleNudge)")
        return

    console.print(
        f"[cyan]Watching[/cyan] {config.session_store_path} "
        f"every {config.interval_seconds:g}s (Ctrl-C to stop)"
    )
    asyncio.run(serve(config))
