"""
Centralized application settings.

Values come from ``REPOMANIFEST_*`` environment variables, an optional TOML
file and a couple of conventional variables (``GITHUB_TOKEN``, ``VISUAL``,
``EDITOR``).
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[no-redef]

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_editor() -> str:
    return os.getenv("VISUAL") or os.getenv("EDITOR") or "vi"


class AppSettings(BaseSettings):
    """Project-wide settings loaded from env or a TOML file."""

    model_config = SettingsConfigDict(
        env_prefix="REPOMANIFEST_",
        extra="ignore",
        populate_by_name=True,
    )

    github_org: str = "TritonDataCenter"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REPOMANIFEST_GITHUB_TOKEN", "GITHUB_TOKEN"),
    )
    github_per_page: int = 100
    github_timeout: int = 30
    repo_base_url: str = "https://github.com/TritonDataCenter"
    editor_command: str = Field(default_factory=_default_editor)
    candidate_cache_path: Optional[Path] = None


_CONFIG_ENV_VAR = "REPOMANIFEST_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("repomanifest.toml")


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from the primary TOML file on disk."""
    candidates: List[Path] = []
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)

    for candidate in candidates:
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections into AppSettings keyword arguments."""
    data: Dict[str, Any] = {}

    github = raw.get("github", {})
    if "org" in github:
        data["github_org"] = github["org"]
    if "api_url" in github:
        data["github_api_url"] = github["api_url"]
    if "token" in github:
        data["github_token"] = _blank_to_none(github["token"])
    if "per_page" in github:
        data["github_per_page"] = int(github["per_page"])
    if "timeout" in github:
        data["github_timeout"] = int(github["timeout"])
    if "repo_base_url" in github:
        data["repo_base_url"] = github["repo_base_url"]

    editor = raw.get("editor", {})
    if editor.get("command"):
        data["editor_command"] = editor["command"]

    debug = raw.get("debug", {})
    if "candidate_cache_path" in debug:
        data["candidate_cache_path"] = _blank_to_none(debug["candidate_cache_path"])

    return data


def load_settings() -> AppSettings:
    raw = _load_toml_config()
    flattened = _flatten_config(raw)
    return AppSettings(**flattened)


settings = load_settings()
