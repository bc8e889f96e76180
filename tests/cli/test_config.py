"""Tests for CLI configuration management."""

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from src.cli.utils.config import ConfigError, ConfigManager
from src.nudge.config import DEFAULT_IDLE_NUDGE_MS, DEFAULT_MAX_NUDGES
from src.server.config import DispatchConfig, WatchdogConfig


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_default_config_dir(self):
        """Default config dir is ~/.idle-nudge."""
        manager = ConfigManager()
        assert manager.config_dir == Path.home() / ".idle-nudge"

    def test_custom_config_dir(self):
        """Custom config dir is respected."""
        custom = Path("/tmp/custom-idle-nudge")
        manager = ConfigManager(custom)
        assert manager.config_dir == custom
        assert manager.config_path == custom / "config.yaml"

    def test_exists_returns_false_when_missing(self):
        """exists() returns False when config doesn't exist."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "nonexistent")
            assert manager.exists() is False

    def test_save_and_load(self):
        """Configuration can be saved and loaded."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "idle-nudge")
            manager.save(
                Path("/data/sessions.json"),
                Path("/data/sessions"),
                "webhook",
                "http://localhost:8080/api/nudge",
            )

            assert manager.exists()

            loaded = manager.load()
            assert isinstance(loaded, WatchdogConfig)
            assert loaded.session_store_path == Path("/data/sessions.json")
            assert loaded.sessions_dir == Path("/data/sessions")
            assert loaded.interval_seconds == 60.0
            assert loaded.dispatch == DispatchConfig("webhook", "http://localhost:8080/api/nudge")
            assert loaded.policy.idle_ms == DEFAULT_IDLE_NUDGE_MS
            assert loaded.policy.max_nudges == DEFAULT_MAX_NUDGES

    def test_idle_nudge_object(self):
        """agents.defaults.idleNudge objects override the defaults."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.save(
                Path("/data/sessions.json"),
                idle_nudge={"idleMs": 120_000, "message": "wrap up", "maxNudges": 1},
            )

            policy = manager.load().policy
            assert policy.idle_ms == 120_000
            assert policy.message == "wrap up"
            assert policy.max_nudges == 1

    def test_idle_nudge_false_disables(self):
        """idleNudge: false yields no policy."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.save(Path("/data/sessions.json"), idle_nudge=False)
            loaded = manager.load()
            assert loaded.policy is None
            assert not loaded.enabled

    def test_missing_idle_nudge_uses_defaults(self):
        """A config without an agents section still enables nudging."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.config_path.write_text("session_store: /data/sessions.json\n")
            assert manager.load().policy.idle_ms == DEFAULT_IDLE_NUDGE_MS

    def test_load_missing_raises(self):
        """Loading missing config raises ConfigError."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "nonexistent")
            with pytest.raises(ConfigError, match="not found"):
                manager.load()

    def test_load_invalid_yaml_raises(self):
        """Loading invalid YAML raises ConfigError."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.config_path.write_text("invalid: yaml: content: [")
            with pytest.raises(ConfigError, match="Invalid YAML"):
                manager.load()

    def test_load_non_mapping_raises(self):
        """A YAML list at top level raises ConfigError."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.config_path.write_text("- a\n- b\n")
            with pytest.raises(ConfigError, match="expected a mapping"):
                manager.load()

    def test_load_missing_session_store_raises(self):
        """session_store is required."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.config_path.write_text("dispatch:\n  method: noop\n")
            with pytest.raises(ConfigError, match="missing session_store"):
                manager.load()

    def test_negative_idle_ms_raises(self):
        """A negative idleMs is a configuration error."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.save(Path("/data/sessions.json"), idle_nudge=-5)
            with pytest.raises(ConfigError):
                manager.load()

    def test_bad_interval_raises(self):
        """A non-numeric interval_seconds raises ConfigError."""
        with TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir))
            manager.config_path.write_text(
                "session_store: /data/sessions.json\ninterval_seconds: often\n"
            )
            with pytest.raises(ConfigError, match="Invalid config"):
                manager.load()
