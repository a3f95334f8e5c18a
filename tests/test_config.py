"""Summary: Tests for configuration loading.

Importance: Ensures defaults, .env, and environment overrides behave correctly.
Alternatives: Validate configuration manually during runtime.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from timesherpa.config import AppConfig, load_defaults, load_dotenv


DEFAULTS = {
    "ai_provider": "mock",
    "gemini_api_key": "",
    "gemini_model": "gemini-1.5-flash",
    "gemini_base_url": "https://generativelanguage.googleapis.com/v1beta",
    "ollama_url": "http://localhost:11434",
    "ollama_model": "llama3",
    "calendar_provider": "mock",
    "calendar_api_base_url": "https://www.googleapis.com/calendar/v3",
    "calendar_fixture_path": "data/mock_events.json",
    "timezone": "UTC",
    "default_workweek": "monday,tuesday,wednesday,thursday,friday",
    "analysis_lookback_days": "30",
    "api_host": "127.0.0.1",
    "api_port": "8000",
    "api_key": "",
}

OVERRIDDEN = (
    "TIMESHERPA_AI_PROVIDER",
    "GEMINI_API_KEY",
    "TIMESHERPA_TIMEZONE",
    "TIMESHERPA_LOOKBACK_DAYS",
    "TIMESHERPA_CALENDAR_PROVIDER",
)


def _write_defaults(root: Path) -> None:
    """Summary: Write a defaults.json under root/config.

    Importance: AppConfig.from_env reads defaults relative to the working directory.
    Alternatives: Patch load_defaults.
    """

    (root / "config").mkdir()
    (root / "config" / "defaults.json").write_text(json.dumps(DEFAULTS), encoding="utf-8")


def test_load_defaults_reads_json(tmp_path: Path) -> None:
    """Summary: Verify defaults are parsed from JSON.

    Importance: Confirms config file is the source of truth for variables.
    Alternatives: Hardcode defaults in the test.
    """

    defaults_path = tmp_path / "defaults.json"
    defaults_path.write_text("{\"timezone\": \"Europe/Paris\"}", encoding="utf-8")
    assert load_defaults(defaults_path)["timezone"] == "Europe/Paris"


def test_load_defaults_missing_file(tmp_path: Path) -> None:
    """Summary: A missing defaults file raises FileNotFoundError.

    Importance: Misconfigured deployments fail loudly at startup.
    Alternatives: Fall back to hardcoded defaults.
    """

    with pytest.raises(FileNotFoundError):
        load_defaults(tmp_path / "missing.json")


def test_load_dotenv_sets_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Ensure .env values populate environment variables.

    Importance: Validates local secret loading without external tools.
    Alternatives: Assume OS environment is always set.
    """

    env_path = tmp_path / ".env"
    env_path.write_text("# comment\nTIMESHERPA_AI_PROVIDER=ollama\n\nnot-a-pair\n", encoding="utf-8")
    monkeypatch.delenv("TIMESHERPA_AI_PROVIDER", raising=False)
    load_dotenv(env_path)
    assert os.getenv("TIMESHERPA_AI_PROVIDER") == "ollama"
    os.environ.pop("TIMESHERPA_AI_PROVIDER", None)


def test_app_config_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Verify AppConfig honors defaults when env is absent.

    Importance: Confirms config file remains the baseline for variables.
    Alternatives: Inline defaults directly in the AppConfig class.
    """

    _write_defaults(tmp_path)
    monkeypatch.chdir(tmp_path)
    for name in OVERRIDDEN:
        monkeypatch.delenv(name, raising=False)
    config = AppConfig.from_env()
    assert config.ai_provider == "mock"
    assert config.gemini_api_key is None
    assert config.calendar_provider == "mock"
    assert config.timezone == "UTC"
    assert config.analysis_lookback_days == 30
    assert config.api_port == 8000


def test_app_config_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Environment variables override defaults.

    Importance: Deployments configure secrets and timezones without editing files.
    Alternatives: Require a custom defaults file per deployment.
    """

    _write_defaults(tmp_path)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TIMESHERPA_AI_PROVIDER", "gemini")
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.setenv("TIMESHERPA_TIMEZONE", "America/New_York")
    monkeypatch.setenv("TIMESHERPA_LOOKBACK_DAYS", "14")
    config = AppConfig.from_env()
    assert config.ai_provider == "gemini"
    assert config.gemini_api_key == "secret"
    assert config.timezone == "America/New_York"
    assert config.analysis_lookback_days == 14
