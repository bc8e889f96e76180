"""Pluggable nudge dispatch strategies."""
import asyncio
import logging
import shlex

import httpx

from src.nudge.sweep import NudgeOutcome, NudgeStatus

logger = logging.getLogger(__name__)

_VALID_METHODS = ("webhook", "subprocess", "noop")
_METHODS_REQUIRING_TARGET = ("webhook", "subprocess")


class NudgeDispatcher:
    """Triggers a follow-up agent turn carrying the nudge message.

    The dispatch method is determined by ``method``:
      - ``"webhook"``: POST ``{"session_key", "message"}`` to a URL
      - ``"subprocess"``: run a command template with ``{session_key}``
        and ``{message}`` placeholders (values are shell-quoted)
      - ``"noop"``: do nothing and report the nudge as skipped
    """

    def __init__(self, method: str, target: str = "", timeout: float = 10.0) -> None:
        if method not in _VALID_METHODS:
            raise ValueError(
                f"Unknown dispatch method '{method}'. "
                f"Expected one of: {', '.join(repr(m) for m in _VALID_METHODS)}."
            )
        if method in _METHODS_REQUIRING_TARGET and not target:
            raise ValueError(f"Dispatch target required for method '{method}'")
        self._method = method
        self._target = target
        self._timeout = timeout

    @property
    def method(self) -> str:
        return self._method

    async def __call__(self, session_key: str, message: str) -> NudgeOutcome:
        return await self.dispatch(session_key, message)

    async def dispatch(self, session_key: str, message: str) -> NudgeOutcome:
        if self._method == "noop":
            logger.info("noop dispatcher: skipping nudge for %s", session_key)
            return NudgeOutcome(NudgeStatus.SKIPPED)
        if self._method == "webhook":
            return await self._dispatch_webhook(session_key, message)
        return await self._dispatch_subprocess(session_key, message)

    async def _dispatch_webhook(self, session_key: str, message: str) -> NudgeOutcome:
        """POST the nudge to the agent runner.

        A JSON body of ``{"status": "skipped"}`` means the runner declined,
        e.g. because the session already has a turn in flight.
        """
        logger.info("Dispatching nudge via webhook: %s session_key=%s", self._target, session_key)
        payload = {"session_key": session_key, "message": message}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._target, json=payload)
        if response.status_code >= 400:
            return NudgeOutcome(
                NudgeStatus.ERROR,
                error=f"Webhook {self._target} returned {response.status_code}",
            )
        return NudgeOutcome(_status_from_body(response))

    async def _dispatch_subprocess(self, session_key: str, message: str) -> NudgeOutcome:
        """Run the nudge command and wait for it to finish."""
        cmd = self._target.format(
            session_key=shlex.quote(session_key), message=shlex.quote(message)
        )
        logger.info("Dispatching nudge via subprocess for %s", session_key)
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return NudgeOutcome(
                NudgeStatus.ERROR, error=f"Nudge command timed out after {self._timeout}s"
            )
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            return NudgeOutcome(
                NudgeStatus.ERROR,
                error=f"Nudge command exited with {process.returncode}: {detail}",
            )
        return NudgeOutcome(NudgeStatus.OK)


def _status_from_body(response: httpx.Response) -> NudgeStatus:
    try:
        body = response.json()
    except ValueError:
        return NudgeStatus.OK
    if isinstance(body, dict) and body.get("status") == NudgeStatus.SKIPPED.value:
        return NudgeStatus.SKIPPED
    return NudgeStatus.OK

