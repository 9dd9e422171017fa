"""Core configuration.

Why here:
- The CLI, the services and the adapters read one typed contract
  (pydantic-settings, prefix `EKSUP_`) instead of poking at `os.environ`.
- Defaults a user sets once (`eksup doctor set-defaults`) live in a per-user
  `.env`, so they apply from any working directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "eksup"
CONFIG_DIR_ENV = "EKSUP_CONFIG_DIR"

_QUOTES = ("'", '"')


def get_user_config_dir() -> Path:
    """Per-user configuration directory.

    `EKSUP_CONFIG_DIR` wins; otherwise the platform location (`%APPDATA%`,
    `~/Library/Application Support`, `$XDG_CONFIG_HOME` or `~/.config`).
    """

    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home()))) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    # Unquoted values may carry a trailing " # comment".
    return value.split(" #", 1)[0].rstrip()


def parse_env_text(text: str) -> dict[str, str]:
    """Parse `.env` content: `KEY=value`, optional `export ` prefix, `#` comments."""

    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            data[key] = _unquote(value.strip())
    return data


def _format_env_value(value: str) -> str:
    if any(ch.isspace() for ch in value) or "#" in value or value[:1] in _QUOTES:
        quote = "'" if '"' in value else '"'
        return f"{quote}{value}{quote}"
    return value


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Write or update variables in the user's global .env.

    Keys mapped to `None` are left untouched; an empty string removes the key.
    Values with spaces or `#` are written double-quoted.
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = parse_env_text(env_path.read_text(encoding="utf-8"))

    for key, value in values.items():
        if value is None:
            continue
        if value == "":
            existing.pop(key, None)
        else:
            existing[key] = value

    lines = ["# eksup user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={_format_env_value(existing[key])}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings."""

    model_config = SettingsConfigDict(
        env_prefix="EKSUP_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first, then the user's global one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    region: str | None = Field(
        default=None,
        description="AWS region written into generated playbooks.",
    )
    checklist_path: Path = Field(
        default=Path("CHECKLIST.md"),
        description="Checklist used by `lint` and `summary` when no path is given.",
    )
    output_dir: Path = Field(
        default=Path("."),
        description="Directory where playbooks are written.",
    )
    release_data_path: Path | None = Field(
        default=None,
        description="Override for the bundled Kubernetes release data (YAML).",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit logs as JSON lines on stderr.",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {value}")
        return value

    @field_validator("region")
    @classmethod
    def _blank_region_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None
