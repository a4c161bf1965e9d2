"""Load documents from a GitHub repository through github3.py.

The repository tree is listed once per loader with a single recursive tree
request; file contents are fetched lazily and memoised.

Example
-------
>>> from website_text.loaders.github import GitHubLoader
>>> loader = GitHubLoader("df12", "docs", branch="main", directory="guide")
>>> loader.scan()  # doctest: +SKIP
['/index.md', '/install.md']
"""

from __future__ import annotations

import logging
import os
import typing as typ

from github3 import GitHub
from github3 import exceptions as gh_exc

from website_text._constants import SOURCE_ENCODING
from website_text.exceptions import LoaderError

from .base import AbstractLoader, hash_identity, normalize_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from github3.repos.repo import Repository

logger = logging.getLogger(__name__)


class GitHubLoader(AbstractLoader):
    """Serve the files of ``owner/repository`` at ``branch`` below ``directory``.

    Paths are reported relative to ``directory`` with a leading ``/``.
    """

    def __init__(  # noqa: PLR0913
        self,
        owner: str,
        repository: str,
        *,
        branch: str = "master",
        directory: str = "",
        token: str | None = None,
        include: cabc.Iterable[str] = (),
        exclude: cabc.Iterable[str] = (),
    ) -> None:
        super().__init__(include=include, exclude=exclude)
        self.owner = owner
        self.repository = repository
        self.branch = branch
        self.directory = directory.strip("/")
        self._token = token
        self._client: GitHub | None = None
        self._repo: Repository | None = None
        self._blobs: dict[str, str] = {}
        self._contents: dict[str, str] = {}

    def _github(self) -> GitHub:
        """Return a cached github3.py client, lazily configured from env tokens."""
        if self._client is None:
            token = self._token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
            self._client = GitHub(token=token)
        return self._client

    def _repository(self) -> Repository:
        if self._repo is None:
            try:
                repo = self._github().repository(self.owner, self.repository)
            except gh_exc.GitHubException as exc:
                msg = f"Unable to dialog with GitHub API for {self.owner}/{self.repository}"
                raise LoaderError(msg) from exc
            if repo is None:
                msg = f"Repository {self.owner}/{self.repository} not found"
                raise LoaderError(msg)
            self._repo = repo
        return self._repo

    def list_paths(self) -> list[str]:
        """List the blobs below ``directory`` with one recursive tree request.

        Raises
        ------
        LoaderError
            If the repository or branch cannot be read.
        """
        try:
            tree = self._repository().tree(self.branch, recursive=True)
        except gh_exc.GitHubException as exc:
            msg = f'Unable to list files of branch "{self.branch}"'
            raise LoaderError(msg) from exc
        if getattr(tree, "truncated", False):
            logger.warning(
                "GitHub truncated the tree of %s/%s; some files are missing",
                self.owner,
                self.repository,
            )

        prefix = f"{self.directory}/" if self.directory else ""
        self._blobs = {}
        for entry in tree.tree:
            if entry.type != "blob" or not entry.path.startswith(prefix):
                continue
            path = normalize_path(entry.path[len(prefix) :])
            self._blobs[path] = entry.path
        return sorted(self._blobs)

    def load(self, path: str) -> str:
        """Return the UTF-8 text of ``path``, fetching it on first use.

        Raises
        ------
        LoaderError
            If the file does not exist or cannot be fetched.
        """
        path = normalize_path(path)
        if path in self._contents:
            return self._contents[path]
        if self._paths is None:
            self.scan()
        if path not in self._blobs:
            msg = f'File "{path}" doesn\'t exist'
            raise LoaderError(msg)
        try:
            contents = self._repository().file_contents(
                self._blobs[path], ref=self.branch
            )
            text = bytes(contents.decoded).decode(SOURCE_ENCODING)
        except (gh_exc.GitHubException, UnicodeDecodeError) as exc:
            msg = f'Unable to get content of file "{path}"'
            raise LoaderError(msg) from exc
        self._contents[path] = text
        return text

    def unique_id(self) -> str:
        """Return a SHA-1 over repository coordinates (never the token)."""
        return hash_identity(self.owner, self.repository, self.branch, self.directory)


__all__ = ["GitHubLoader"]
