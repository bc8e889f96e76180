"""Run a single idle sweep."""

import asyncio
import time

import typer
from rich.console import Console

from src.cli.output import (
    format_duration_ms,
    format_error,
    format_success,
    format_table,
    format_warning,
    json_output,
)
from src.cli.utils import ConfigManager
from src.cli.utils.config import ConfigError
from src.server.app import build_sweeper
from src.server.config import WatchdogConfig

console = Console()


async def _dry_run(config: WatchdogConfig) -> list[dict]:
    sweeper = build_sweeper(config)
    store = await sweeper.load_store(config.session_store_path)
    if store is None:
        raise RuntimeError(f"Could not load session store {config.session_store_path}")
    now_ms = int(time.time() * 1000)
    candidates = await sweeper.collect_candidates(store, config.policy, now_ms, config.sessions_dir)
    return [
        {
            "session_key": c.session_key,
            "session_id": c.entry.session_id,
            "idle_ms": now_ms - (c.entry.updated_at or 0),
        }
        for c in candidates
    ]


async def _sweep(config: WatchdogConfig, force: bool) -> dict:
    sweeper = build_sweeper(config)
    result = await sweeper.sweep(
        config.session_store_path,
        config.policy,
        sessions_dir=config.sessions_dir,
        force=force,
    )
    return {"swept": result.swept, "nudged": result.nudged}


def sweep_command(force: bool, dry_run: bool, json_flag: bool) -> None:
    """Sweep the session store once and nudge idle sessions."""
    try:
        config = ConfigManager().load()
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'idle-nudge init' to configure the watchdog")
        raise typer.Exit(code=1)

    if config.policy is None:
        if json_flag:
            json_output(console, {"status": "disabled", "swept": False, "nudged": 0})
        else:
            format_warning(console, "Idle nudging is disabled (agents.defaults.idleNudge)")
        return

    try:
        if dry_run:
            candidates = asyncio.run(_dry_run(config))
        else:
            summary = asyncio.run(_sweep(config, force))
    except (RuntimeError, ValueError) as e:
        format_error(console, str(e))
        raise typer.Exit(code=1)

    if dry_run:
        if json_flag:
            json_output(console, {"status": "dry_run", "candidates": candidates})
            return
        if not candidates:
            console.print("[dim]No idle sessions to nudge[/dim]")
            return
        rows = [
            (c["session_key"], c["session_id"], format_duration_ms(c["idle_ms"]))
            for c in candidates
        ]
        format_table(console, "Idle Sessions", ["Session Key", "Session ID", "Idle"], rows)
        return

    if json_flag:
        json_output(console, {"status": "swept" if summary["swept"] else "not_swept", **summary})
        return
    if not summary["swept"]:
        format_warning(console, "Sweep did not run (throttled or session store unreadable)")
        raise typer.Exit(code=1)
    format_success(console, f"Nudged {summary['nudged']} idle session(s)")
