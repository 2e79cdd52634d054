"""Text storage backends used by the rc file patcher.

The patcher never touches the filesystem directly. It is handed a
``TextStorage`` so that tests can pass an isolated ``MemoryTextStorage``
instead of patching module globals.
"""

from __future__ import annotations

import errno
from pathlib import Path, PurePosixPath
from typing import Protocol


class TextStorage(Protocol):
    def read_text(self, path: Path) -> str:
        """Return the file contents. Raises FileNotFoundError if absent."""
        ...

    def write_text(self, path: Path, content: str, create: bool = True) -> None:
        ...

    def ensure_dir(self, path: Path) -> None:
        ...


class LocalTextStorage:
    """UTF-8 text files on the local filesystem.

    Line endings are kept exactly as found, so CRLF files stay CRLF.
    """

    def read_text(self, path: Path) -> str:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: Path, content: str, create: bool = True) -> None:
        path = Path(path)
        if not create and not path.exists():
            raise FileNotFoundError(errno.ENOENT, "No such file", str(path))
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)


class MemoryTextStorage:
    """In-memory storage with POSIX-style paths, for tests and dry runs.

    Each instance is fully isolated. Paths (files or directories) can be
    marked read-only, and reads or writes can be made to fail with a given
    error.
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[PurePosixPath, str] = {}
        self._dirs: set[PurePosixPath] = {PurePosixPath("/")}
        self._read_only: set[PurePosixPath] = set()
        self._read_errors: dict[PurePosixPath, OSError] = {}
        self._write_errors: dict[PurePosixPath, OSError] = {}
        self.reads: list[PurePosixPath] = []
        self.writes: list[PurePosixPath] = []
        for path, content in (files or {}).items():
            key = self._key(path)
            self.ensure_dir(key.parent)
            self._files[key] = content

    @staticmethod
    def _key(path: Path | str) -> PurePosixPath:
        return PurePosixPath(str(path))

    def exists(self, path: Path | str) -> bool:
        key = self._key(path)
        return key in self._files or key in self._dirs

    def is_dir(self, path: Path | str) -> bool:
        return self._key(path) in self._dirs

    def set_read_only(self, path: Path | str) -> None:
        self._read_only.add(self._key(path))

    def fail_reads(self, path: Path | str, error: OSError) -> None:
        self._read_errors[self._key(path)] = error

    def fail_writes(self, path: Path | str, error: OSError) -> None:
        self._write_errors[self._key(path)] = error

    def _is_read_only(self, key: PurePosixPath) -> bool:
        return any(p == key or p in key.parents for p in self._read_only)

    def read_text(self, path: Path) -> str:
        key = self._key(path)
        self.reads.append(key)
        if key in self._read_errors:
            raise self._read_errors[key]
        if key in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(key))
        try:
            return self._files[key]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "No such file", str(key)) from None

    def write_text(self, path: Path, content: str, create: bool = True) -> None:
        key = self._key(path)
        if key in self._write_errors:
            raise self._write_errors[key]
        if key in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(key))
        if key.parent not in self._dirs:
            raise FileNotFoundError(errno.ENOENT, "No such directory", str(key.parent))
        if key not in self._files and not create:
            raise FileNotFoundError(errno.ENOENT, "No such file", str(key))
        if self._is_read_only(key):
            raise PermissionError(errno.EACCES, "Permission denied", str(key))
        self._files[key] = content
        self.writes.append(key)

    def ensure_dir(self, path: Path) -> None:
        key = self._key(path)
        for part in [*reversed(key.parents), key]:
            if part in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(part))
            if part not in self._dirs:
                if self._is_read_only(part):
                    raise PermissionError(errno.EACCES, "Permission denied", str(part))
                self._dirs.add(part)
