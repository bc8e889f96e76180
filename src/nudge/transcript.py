"""Terminal-state detection from JSONL session transcripts.

Each session has ``<sessions_dir>/<session_id>.jsonl``; every line is an
independent JSON record. Message records look like::

    {"type": "message", "message": {"role": "assistant", "content": ...}}

where ``content`` is a string or a list of ``{"type": "text", "text": ...}``
blocks. A session is terminal when its latest assistant message ends with
the ``END`` marker on its own line.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

TERMINAL_MARKER = "END"


def transcript_path(session_id: str, sessions_dir: Union[str, Path]) -> Path:
    return Path(sessions_dir) / f"{session_id}.jsonl"


def extract_message_text(content: Any) -> str:
    """Text of a message: the string itself, or the last text block in a list."""
    if isinstance(content, str):
        return content
    text = ""
    if isinstance(content, list):
        for block in content:
            if (
                isinstance(block, dict)
                and block.get("type") == "text"
                and isinstance(block.get("text"), str)
            ):
                text = block["text"]
    return text


def is_terminal_text(text: str) -> bool:
    trimmed = text.strip()
    return trimmed == TERMINAL_MARKER or trimmed.endswith("\n" + TERMINAL_MARKER)


def _parse_assistant_message(line: str) -> Optional[dict]:
    try:
        record = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(record, dict) or record.get("type") != "message":
        return None
    message = record.get("message")
    if not isinstance(message, dict) or message.get("role") != "assistant":
        return None
    return message


def last_assistant_text(raw: str) -> Optional[str]:
    """Text of the latest assistant message in a transcript, or None if there is none."""
    for line in reversed(raw.rstrip().split("\n")):
        line = line.strip()
        if not line:
            continue
        message = _parse_assistant_message(line)
        if message is None:
            continue
        return extract_message_text(message.get("content"))
    return None


def session_ended_with_marker(session_id: str, sessions_dir: Union[str, Path]) -> bool:
    """Return True if the session's latest assistant message ends with END.

    Read failures (missing file, permissions) count as not terminal. Invalid
    UTF-8 bytes are replaced rather than failing the read.
    """
    path = transcript_path(session_id, sessions_dir)
    try:
        raw = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Transcript %s not readable: %s", path, e)
        return False
    text = last_assistant_text(raw)
    return text is not None and is_terminal_text(text)


async def transcript_is_terminal(session_id: str, sessions_dir: Union[str, Path]) -> bool:
    """Async variant reading the transcript off the event loop."""
    return await asyncio.to_thread(session_ended_with_marker, session_id, sessions_dir)
