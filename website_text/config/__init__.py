"""Load and validate the website-text YAML configuration.

This subpackage parses the project's ``website-text.yaml`` file into typed
dataclasses: where documents come from (:class:`SourceConfig`), where state
is cached (:class:`CacheConfig`) and how documents are generated
(:class:`GeneratorOptions`). The primary entry point is
:func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from website_text.config import load_site_config
>>> site = load_site_config(Path("config/website-text.yaml"))  # doctest: +SKIP
>>> site.options.url_prefix  # doctest: +SKIP
'/docs'
"""

from .loader import load_site_config
from .models import CacheConfig, GeneratorOptions, SiteConfig, SiteConfigError, SourceConfig

__all__ = [
    "CacheConfig",
    "GeneratorOptions",
    "SiteConfig",
    "SiteConfigError",
    "SourceConfig",
    "load_site_config",
]
