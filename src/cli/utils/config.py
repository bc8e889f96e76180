"""Configuration file management for CLI."""

from pathlib import Path
from typing import Any, Optional

import yaml

from src.nudge.config import NudgeConfigError, resolve_nudge_policy
from src.server.config import DispatchConfig, WatchdogConfig


class ConfigError(Exception):
    """Configuration file error."""

    pass


class ConfigManager:
    """Manages watchdog configuration in ~/.idle-nudge/config.yaml.

    Example file::

        session_store: /var/lib/agent/sessions.json
        sessions_dir: /var/lib/agent/sessions
        interval_seconds: 60
        dispatch:
          method: webhook
          target: http://localhost:8080/api/nudge
        agents:
          defaults:
            idleNudge: {idleMs: 600000, maxNudges: 2}
    """

    DEFAULT_DIR = Path.home() / ".idle-nudge"
    CONFIG_FILE = "config.yaml"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = config_dir or self.DEFAULT_DIR
        self._config_path = self._config_dir / self.CONFIG_FILE

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def config_path(self) -> Path:
        return self._config_path

    def exists(self) -> bool:
        """Check if configuration exists."""
        return self._config_path.exists()

    def load_raw(self) -> dict[str, Any]:
        """Load the YAML document. Raises ConfigError if missing or malformed."""
        if not self._config_path.exists():
            raise ConfigError(
                f"Config not found at {self._config_path}. Run 'idle-nudge init' first."
            )
        try:
            with open(self._config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self._config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Invalid config: expected a mapping at top level")
        return data

    def load(self) -> WatchdogConfig:
        """Load configuration from file. Raises ConfigError if not found or invalid."""
        data = self.load_raw()
        if not data.get("session_store"):
            raise ConfigError("Invalid config: missing session_store")

        agents = data.get("agents") or {}
        defaults = agents.get("defaults") if isinstance(agents, dict) else None
        if defaults is not None and not isinstance(defaults, dict):
            raise ConfigError("Invalid config: agents.defaults must be a mapping")
        try:
            policy = resolve_nudge_policy(defaults)
        except NudgeConfigError as e:
            raise ConfigError(str(e)) from e

        dispatch = data.get("dispatch") or {}
        if not isinstance(dispatch, dict):
            raise ConfigError("Invalid config: dispatch must be a mapping")
        sessions_dir = data.get("sessions_dir")

        try:
            return WatchdogConfig(
                session_store_path=Path(data["session_store"]).expanduser(),
                policy=policy,
                sessions_dir=Path(sessions_dir).expanduser() if sessions_dir else None,
                interval_seconds=float(data.get("interval_seconds", 60)),
                dispatch=DispatchConfig(
                    method=str(dispatch.get("method", "noop")),
                    target=str(dispatch.get("target", "")),
                    timeout=float(dispatch.get("timeout", 10.0)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config: {e}") from e

    def save(
        self,
        session_store: Path,
        sessions_dir: Optional[Path] = None,
        dispatch_method: str = "noop",
        dispatch_target: str = "",
        idle_nudge: Any = True,
    ) -> None:
        """Save configuration to file."""
        self._config_dir.mkdir(parents=True, exist_ok=True)

        config_data: dict[str, Any] = {"session_store": str(session_store)}
        if sessions_dir is not None:
            config_data["sessions_dir"] = str(sessions_dir)
        config_data["dispatch"] = {"method": dispatch_method, "target": dispatch_target}
        config_data["agents"] = {"defaults": {"idleNudge": idle_nudge}}

        with open(self._config_path, "w") as f:
            yaml.safe_dump(config_data, f, default_flow_style=False)
