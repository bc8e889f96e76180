"""Show the resolved idle nudge policy."""

import typer
from rich.console import Console

from src.cli.output import format_duration_ms, format_error, format_warning, json_output
from src.cli.utils import ConfigManager
from src.cli.utils.config import ConfigError

console = Console()


def policy_command(json_flag: bool) -> None:
    """Show the policy resolved from agents.defaults.idleNudge."""
    try:
        config = ConfigManager().load()
    except ConfigError as e:
        if json_flag:
            json_output(console, {"status": "not_initialized", "error": str(e)})
        else:
            format_error(console, str(e), hint="Run 'idle-nudge init' to configure the watchdog")
        raise typer.Exit(code=1)

    policy = config.policy
    if json_flag:
        if policy is None:
            json_output(console, {"status": "disabled"})
        else:
            json_output(
                console,
                {
                    "status": "enabled",
                    "idle_ms": policy.idle_ms,
                    "max_nudges": policy.max_nudges,
                    "message": policy.message,
                },
            )
        return

    if policy is None:
        format_warning(console, "Idle nudging is disabled")
        return

    max_nudges = str(policy.max_nudges) if policy.max_nudges > 0 else "unlimited"
    console.print("[bold]Idle Nudge Policy[/bold]")
    console.print()
    console.print(f"[cyan]Idle after:[/cyan]  {format_duration_ms(policy.idle_ms)} ({policy.idle_ms} ms)")
    console.print(f"[cyan]Max nudges:[/cyan]  {max_nudges}")
    console.print(f"[cyan]Dispatch:[/cyan]    {config.dispatch.method}")
    console.print("[cyan]Message:[/cyan]")
    console.print(policy.message, markup=False, highlight=False)
