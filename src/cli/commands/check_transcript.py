"""Report whether a session transcript ended with END."""

from pathlib import Path

import typer
from rich.console import Console

from src.cli.output import format_error, json_output
from src.cli.utils import validate_session_id
from src.nudge.transcript import (
    is_terminal_text,
    last_assistant_text,
    transcript_path,
)

console = Console()


def check_transcript_command(session_id: str, sessions_dir: Path, json_flag: bool) -> None:
    """Show the latest assistant message and whether it is terminal."""
    try:
        session_id = validate_session_id(session_id)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    path = transcript_path(session_id, sessions_dir)
    try:
        raw = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        format_error(console, f"Cannot read transcript {path}: {e}")
        raise typer.Exit(code=1)

    text = last_assistant_text(raw)
    terminal = text is not None and is_terminal_text(text)

    if json_flag:
        json_output(
            console,
            {
                "session_id": session_id,
                "transcript": str(path),
                "terminal": terminal,
                "last_assistant_text": text,
            },
        )
        return

    status = "[green]ended (END)[/green]" if terminal else "[yellow]open[/yellow]"
    console.print(f"[cyan]Session:[/cyan]    {session_id}")
    console.print(f"[cyan]Transcript:[/cyan] {path}")
    console.print(f"[cyan]Status:[/cyan]     {status}")
    if text is None:
        console.print("[dim]No assistant message found[/dim]")
    else:
        console.print("[cyan]Last reply:[/cyan]")
        console.print(text[-200:], markup=False, highlight=False)
