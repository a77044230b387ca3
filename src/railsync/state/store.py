"""Small key-value persistence layer.

The reporter only ever needs get/set/delete/clear on short text values, so the
filesystem adapter maps every key to a file inside one directory. Writes are
synchronous; nothing is buffered.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote, unquote

KEY_SEPARATOR = "+"


def safe_key(*parts: object) -> str:
    """Join key parts into one key.

    Every part is percent-encoded, so the separator never occurs inside a part
    and distinct part tuples always give distinct keys:
    ``("chrome 1", "10")`` and ``("chrome-1", "10")`` stay apart.
    """
    return KEY_SEPARATOR.join(quote(str(part), safe="") for part in parts)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal persistence interface used by markers and the run-id cache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def clear(self) -> None: ...


class MemoryStore:
    """Dict-backed store for tests and dry runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def clear(self) -> None:
        self._data.clear()


class FileStore:
    """One file per key inside ``directory``; the file text is the value.

    Keys are percent-encoded into file names, so any text is a valid key.

    The directory is created lazily on the first write so that read-only
    queries against a fresh state directory do not touch the disk.
    """

    def __init__(self, directory: str | Path):
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    @staticmethod
    def _file_name(key: str) -> str:
        name = quote(key, safe=KEY_SEPARATOR)
        if name in (".", ".."):
            return name.replace(".", "%2E")
        return name

    def _path(self, key: str) -> Path:
        return self._dir / self._file_name(key)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        return sorted(unquote(p.name) for p in self._dir.iterdir() if p.is_file())

    def clear(self) -> None:
        if self._dir.exists():
            shutil.rmtree(self._dir)
