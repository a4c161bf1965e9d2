"""Utility helpers shared by the website-text configuration loader."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from .models import SiteConfigError

SOURCE_TYPES = ("filesystem", "github", "gitlab")
DEFAULT_TOKEN_ENV: dict[str, str] = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
}


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_str(payload: typ.Mapping[str, typ.Any], key: str, section: str) -> str:
    """Return ``payload[key]`` as a non-empty string or raise SiteConfigError."""
    value = _optional_str(payload.get(key))
    if value is None:
        msg = f"Section '{section}' is missing '{key}'."
        raise SiteConfigError(msg)
    return value


def _string_list(value: object | None, key: str) -> list[str]:
    """Normalize a string or list of strings into a list of patterns."""
    match value:
        case None:
            return []
        case str():
            return [value] if value.strip() else []
        case list():
            return [str(item) for item in value if str(item).strip()]
        case _:
            msg = f"'{key}' must be a string or a list of strings."
            raise SiteConfigError(msg)


def _resolve_path(value: str, base_dir: Path) -> Path:
    """Resolve ``value`` relative to the directory holding the config file."""
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _token_from_env(source_type: str, token_env: object | None) -> str | None:
    """Read an API token from ``token_env`` or the source type's default variable."""
    name = _optional_str(token_env) or DEFAULT_TOKEN_ENV.get(source_type)
    if name is None:
        return None
    return _optional_str(os.getenv(name))
