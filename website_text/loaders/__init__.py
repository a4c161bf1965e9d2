"""Backends that enumerate source paths and return their raw text."""

from __future__ import annotations

import os
import typing as typ

from .base import AbstractLoader, Loader
from .filesystem import FileSystemLoader
from .github import GitHubLoader
from .gitlab import GitLabLoader
from .memory import MemoryLoader

if typ.TYPE_CHECKING:
    from website_text.config import SourceConfig


def create_loader(source: SourceConfig) -> AbstractLoader:
    """Build the loader described by a ``source`` configuration block.

    Raises
    ------
    ValueError
        If the source type is unknown or required coordinates are missing.
    LoaderError
        If an include/exclude filter is not a valid regular expression.
    """
    filters = {"include": source.include, "exclude": source.exclude}
    match source.type:
        case "filesystem":
            if source.path is None:
                msg = "A filesystem source requires 'path'"
                raise ValueError(msg)
            return FileSystemLoader(source.path, **filters)
        case "github":
            if not source.owner or not source.repository:
                msg = "A github source requires 'owner' and 'repository'"
                raise ValueError(msg)
            return GitHubLoader(
                source.owner,
                source.repository,
                branch=source.branch,
                directory=source.directory,
                token=source.token,
                **filters,
            )
        case "gitlab":
            if not source.api or not source.project:
                msg = "A gitlab source requires 'api' and 'project'"
                raise ValueError(msg)
            return GitLabLoader(
                source.api,
                source.project,
                ref=source.branch,
                directory=source.directory,
                token=source.token or os.getenv("GITLAB_TOKEN"),
                **filters,
            )
        case _:
            msg = f"Unknown source type '{source.type}'"
            raise ValueError(msg)


__all__ = [
    "AbstractLoader",
    "FileSystemLoader",
    "GitHubLoader",
    "GitLabLoader",
    "Loader",
    "MemoryLoader",
    "create_loader",
]
