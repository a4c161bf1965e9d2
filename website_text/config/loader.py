"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    SOURCE_TYPES,
    _optional_str,
    _require_str,
    _resolve_path,
    _string_list,
    _token_from_env,
)
from .models import CacheConfig, GeneratorOptions, SiteConfig, SiteConfigError, SourceConfig


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the document source and options.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/website-text.yaml``). Relative ``source.path`` and
        ``cache.directory`` values are resolved against its directory.

    Returns
    -------
    SiteConfig
        Parsed configuration: source, cache location and generator options.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the ``source`` section is missing or invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from website_text.config import load_site_config
    >>> config = load_site_config(Path("config/website-text.yaml"))  # doctest: +SKIP
    >>> config.source.type  # doctest: +SKIP
    'filesystem'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    base_dir = path.parent

    source_raw = raw.get("source")
    if not isinstance(source_raw, dict):
        msg = "No 'source' section defined in configuration."
        raise SiteConfigError(msg)

    options_raw = raw.get("options") or {}
    if not isinstance(options_raw, dict):
        msg = "'options' must be a mapping of option names to values."
        raise SiteConfigError(msg)

    cache_raw = raw.get("cache") or {}
    if not isinstance(cache_raw, dict):
        msg = "'cache' must be a mapping."
        raise SiteConfigError(msg)
    cache_directory = _optional_str(cache_raw.get("directory"))

    return SiteConfig(
        source=_build_source_config(source_raw, base_dir),
        options=GeneratorOptions.from_mapping(options_raw),
        cache=CacheConfig(
            directory=_resolve_path(cache_directory, base_dir) if cache_directory else None
        ),
        pygments_style=str(raw.get("pygments_style", "monokai")),
    )


def _build_source_config(
    payload: typ.Mapping[str, typ.Any], base_dir: Path
) -> SourceConfig:
    """Build a SourceConfig, checking the keys each source type requires."""
    source_type = str(payload.get("type", "filesystem")).strip().lower()
    include = _string_list(payload.get("include"), "source.include")
    exclude = _string_list(payload.get("exclude"), "source.exclude")
    directory = str(payload.get("directory") or "")

    match source_type:
        case "filesystem":
            return SourceConfig(
                type=source_type,
                path=_resolve_path(_require_str(payload, "path", "source"), base_dir),
                include=include,
                exclude=exclude,
            )
        case "github":
            return SourceConfig(
                type=source_type,
                owner=_require_str(payload, "owner", "source"),
                repository=_require_str(payload, "repository", "source"),
                branch=str(payload.get("branch", "master")),
                directory=directory,
                token=_token_from_env(source_type, payload.get("token_env")),
                include=include,
                exclude=exclude,
            )
        case "gitlab":
            return SourceConfig(
                type=source_type,
                api=_require_str(payload, "api", "source"),
                project=_require_str(payload, "project", "source"),
                branch=str(payload.get("ref", payload.get("branch", "master"))),
                directory=directory,
                token=_token_from_env(source_type, payload.get("token_env")),
                include=include,
                exclude=exclude,
            )
        case _:
            expected = ", ".join(SOURCE_TYPES)
            msg = f"Unknown source type '{source_type}'; expected one of {expected}."
            raise SiteConfigError(msg)


__all__ = ["load_site_config"]
