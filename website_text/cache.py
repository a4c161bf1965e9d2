"""Key-value stores used to persist generator state between runs.

The generator owns key derivation and encodes its payloads to bytes, so a
cache only has to store opaque values. Backends raise :class:`CacheError`
on failure; the generator treats every such failure as a cache miss.
"""

from __future__ import annotations

import collections.abc as cabc
import hashlib
import os
import tempfile
import typing as typ
from pathlib import Path

from website_text.exceptions import CacheError


@typ.runtime_checkable
class Cache(typ.Protocol):
    """Minimal key-value store consumed by the generator."""

    def get(self, key: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        """Return the value stored under ``key`` or ``default``."""
        ...

    def set(self, key: str, value: typ.Any) -> bool:  # noqa: ANN401
        """Store ``value`` under ``key``."""
        ...

    def set_multiple(self, values: cabc.Mapping[str, typ.Any]) -> bool:
        """Store every item of ``values``."""
        ...

    def has(self, key: str) -> bool:
        """Return whether ``key`` holds a value."""
        ...

    def delete_multiple(self, keys: cabc.Iterable[str]) -> bool:
        """Remove ``keys``; missing keys are ignored."""
        ...


class MemoryCache:
    """Process-local cache backed by a dictionary."""

    def __init__(self) -> None:
        self._values: dict[str, typ.Any] = {}

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        return self._values.get(key, default)

    def set(self, key: str, value: typ.Any) -> bool:  # noqa: ANN401
        self._values[key] = value
        return True

    def set_multiple(self, values: cabc.Mapping[str, typ.Any]) -> bool:
        self._values.update(values)
        return True

    def has(self, key: str) -> bool:
        return key in self._values

    def delete_multiple(self, keys: cabc.Iterable[str]) -> bool:
        for key in keys:
            self._values.pop(key, None)
        return True


class FileCache:
    """Store one file per key below ``directory``.

    Values must be ``bytes``. Writes go to a temporary file that replaces the
    target atomically, so readers never observe partial payloads.
    """

    suffix = ".cache"

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}{self.suffix}"

    def get(self, key: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return default
        except OSError as exc:
            msg = f"Unable to read cache entry '{key}'"
            raise CacheError(msg) from exc

    def set(self, key: str, value: typ.Any) -> bool:  # noqa: ANN401
        if not isinstance(value, bytes | bytearray):
            msg = f"FileCache values must be bytes, got {type(value).__name__}"
            raise CacheError(msg)
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(value)
                Path(tmp_name).replace(path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            msg = f"Unable to write cache entry '{key}'"
            raise CacheError(msg) from exc
        return True

    def set_multiple(self, values: cabc.Mapping[str, typ.Any]) -> bool:
        for key, value in values.items():
            self.set(key, value)
        return True

    def has(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete_multiple(self, keys: cabc.Iterable[str]) -> bool:
        try:
            for key in keys:
                self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            msg = "Unable to delete cache entries"
            raise CacheError(msg) from exc
        return True


__all__ = ["Cache", "FileCache", "MemoryCache"]
