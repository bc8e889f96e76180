"""Session key classification.

Agent-scoped keys look like ``agent:<agent_id>:<rest>``. The ``rest`` part
encodes the session kind: ``main``, ``cron:<job>``, ``subagent:<id>`` or a
ticket slot containing ``:ticket:``.
"""
from typing import Optional

TICKET_MARKER = ":ticket:"


def agent_session_rest(session_key: str) -> Optional[str]:
    """Return the part after ``agent:<agent_id>:``, or None if not agent-scoped."""
    parts = session_key.strip().lower().split(":")
    if len(parts) < 3 or parts[0] != "agent" or not parts[1]:
        return None
    rest = ":".join(parts[2:])
    return rest or None


def is_cron_session_key(session_key: str) -> bool:
    rest = agent_session_rest(session_key)
    return rest is not None and rest.startswith("cron:")


def is_subagent_session_key(session_key: str) -> bool:
    if session_key.strip().lower().startswith("subagent:"):
        return True
    rest = agent_session_rest(session_key)
    return rest is not None and rest.startswith("subagent:")


def is_ticket_session_key(session_key: str) -> bool:
    return TICKET_MARKER in session_key


def is_nudge_eligible_session_key(session_key: str) -> bool:
    """True for ephemeral sessions (cron, subagent, ticket); main sessions never qualify."""
    return (
        is_cron_session_key(session_key)
        or is_subagent_session_key(session_key)
        or is_ticket_session_key(session_key)
    )
