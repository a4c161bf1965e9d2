"""Load documents from a GitLab project through the REST v4 API.

Example
-------
>>> from website_text.loaders.gitlab import GitLabLoader
>>> loader = GitLabLoader("https://gitlab.example", "group/docs", ref="main")
>>> loader.scan()  # doctest: +SKIP
['/index.md']
"""

from __future__ import annotations

import base64
import binascii
import json
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from website_text._constants import SOURCE_ENCODING
from website_text.exceptions import LoaderError

from .base import AbstractLoader, hash_identity, normalize_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PER_PAGE = 100


def _build_session() -> requests.Session:
    """Return a session retrying idempotent requests on transient failures."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class GitLabLoader(AbstractLoader):
    """Serve the blobs of a GitLab project at ``ref`` below ``directory``.

    Paths are reported relative to ``directory`` with a leading ``/``.

    Parameters
    ----------
    api : str
        Base URL of the GitLab instance, for example ``https://gitlab.com``.
    project : str
        Project id or ``namespace/name`` path.
    ref : str, optional
        Branch, tag or commit to read. Defaults to ``"master"``.
    directory : str, optional
        Sub-directory holding the documents.
    token : str, optional
        Private token sent as ``PRIVATE-TOKEN``.
    session : requests.Session, optional
        Preconfigured session; defaults to a retrying session.
    timeout : float, optional
        Per-request timeout in seconds.
    """

    def __init__(  # noqa: PLR0913
        self,
        api: str,
        project: str,
        *,
        ref: str = "master",
        directory: str = "",
        token: str | None = None,
        include: cabc.Iterable[str] = (),
        exclude: cabc.Iterable[str] = (),
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(include=include, exclude=exclude)
        self.api = api.rstrip("/")
        self.project = project
        self.ref = ref
        self.directory = directory.strip("/")
        self.timeout = timeout
        self._session = session or _build_session()
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["PRIVATE-TOKEN"] = token
        self._blob_ids: dict[str, str] = {}
        self._contents: dict[str, str] = {}

    @property
    def _project_url(self) -> str:
        return f"{self.api}/api/v4/projects/{quote(self.project, safe='')}"

    def _get(self, url: str, params: dict[str, typ.Any] | None = None) -> requests.Response:
        try:
            response = self._session.get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Unable to dialog with GitLab API: {exc}"
            raise LoaderError(msg) from exc
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = f"GitLab API request failed with status {response.status_code}: {snippet}"
            raise LoaderError(msg)
        return response

    @staticmethod
    def _json(response: requests.Response) -> typ.Any:  # noqa: ANN401
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            msg = "GitLab API response was not valid JSON"
            raise LoaderError(msg) from exc

    def list_paths(self) -> list[str]:
        """Walk the paginated repository tree and return blob paths."""
        prefix = f"{self.directory}/" if self.directory else ""
        self._blob_ids = {}
        page = 1
        total_pages = 1
        while page <= total_pages:
            response = self._get(
                f"{self._project_url}/repository/tree",
                params={
                    "recursive": "true",
                    "ref": self.ref,
                    "path": self.directory,
                    "per_page": PER_PAGE,
                    "page": page,
                },
            )
            for entry in self._json(response) or []:
                entry_path = str(entry.get("path", "")).strip("/")
                if entry.get("type") != "blob" or not entry_path.startswith(prefix):
                    continue
                self._blob_ids[normalize_path(entry_path[len(prefix) :])] = str(
                    entry["id"]
                )
            header = response.headers.get("X-Total-Pages")
            if header and header.isdigit():
                total_pages = int(header)
            page += 1
        return sorted(self._blob_ids)

    def load(self, path: str) -> str:
        """Return the UTF-8 text of ``path``, fetching its blob on first use."""
        path = normalize_path(path)
        if path in self._contents:
            return self._contents[path]
        if self._paths is None:
            self.scan()
        blob_id = self._blob_ids.get(path)
        if blob_id is None:
            msg = f'File "{path}" doesn\'t exist'
            raise LoaderError(msg)

        payload = self._json(self._get(f"{self._project_url}/repository/blobs/{blob_id}"))
        if payload.get("encoding") != "base64":
            msg = f'Unable to get file id "{blob_id}", bad encoding'
            raise LoaderError(msg)
        try:
            text = base64.b64decode(payload["content"]).decode(SOURCE_ENCODING)
        except (KeyError, binascii.Error, UnicodeDecodeError) as exc:
            msg = f'Unable to get file id "{blob_id}"'
            raise LoaderError(msg) from exc
        self._contents[path] = text
        return text

    def unique_id(self) -> str:
        """Return a SHA-1 over project coordinates (never the token)."""
        return hash_identity(self.api, self.project, self.ref, self.directory)


__all__ = ["GitLabLoader"]
