"""Summary: Application configuration for TimeSherpa.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for providers, analysis, and the API.

    Importance: Ensures all services derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    ai_provider: str
    gemini_api_key: str | None
    gemini_model: str
    gemini_base_url: str
    ollama_url: str
    ollama_model: str
    calendar_provider: str
    calendar_api_base_url: str
    calendar_fixture_path: str
    timezone: str
    default_workweek: str
    analysis_lookback_days: int
    api_host: str
    api_port: int
    api_key: str

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        return AppConfig(
            ai_provider=os.getenv("TIMESHERPA_AI_PROVIDER", defaults["ai_provider"]),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or defaults["gemini_api_key"] or None,
            gemini_model=os.getenv("GEMINI_MODEL", defaults["gemini_model"]),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", defaults["gemini_base_url"]),
            ollama_url=os.getenv("OLLAMA_URL", defaults["ollama_url"]),
            ollama_model=os.getenv("OLLAMA_MODEL", defaults["ollama_model"]),
            calendar_provider=os.getenv(
                "TIMESHERPA_CALENDAR_PROVIDER", defaults["calendar_provider"]
            ),
            calendar_api_base_url=os.getenv(
                "TIMESHERPA_CALENDAR_API_BASE_URL", defaults["calendar_api_base_url"]
            ),
            calendar_fixture_path=os.getenv(
                "TIMESHERPA_CALENDAR_FIXTURE", defaults["calendar_fixture_path"]
            ),
            timezone=os.getenv("TIMESHERPA_TIMEZONE") or defaults["timezone"] or "UTC",
            default_workweek=os.getenv(
                "TIMESHERPA_DEFAULT_WORKWEEK", defaults["default_workweek"]
            ),
            analysis_lookback_days=int(
                os.getenv("TIMESHERPA_LOOKBACK_DAYS", defaults["analysis_lookback_days"])
            ),
            api_host=os.getenv("TIMESHERPA_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("TIMESHERPA_API_PORT", defaults["api_port"])),
            api_key=os.getenv("TIMESHERPA_API_KEY", defaults["api_key"]),
        )


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps secrets out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
