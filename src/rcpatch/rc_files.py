"""Idempotent patching of shell rc files, with one backup per file per session."""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from rcpatch.errors import BackupError, RcFileError, is_permission_error
from rcpatch.storage import LocalTextStorage, TextStorage

logger = logging.getLogger("rcpatch.rc_files")

BACKUP_SUFFIX = ".bak"


def ensure_starts_with(text: str, prefix: str) -> str:
    return text if text.startswith(prefix) else prefix + text


def ensure_ends_with(text: str, suffix: str) -> str:
    return text if text.endswith(suffix) else text + suffix


@dataclass(frozen=True)
class PatchSpec:
    """Text to insert at the start and/or end of an rc file."""

    prepend: str = ""
    append: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.prepend and not self.append

    @classmethod
    def coerce(cls, command: str | PatchSpec) -> PatchSpec:
        """A bare string is a command to append."""
        if isinstance(command, str):
            return cls(append=command)
        return command


class RcBackups:
    """Backs up rc files before they are modified.

    Each path is copied at most once per instance, so the backup always holds
    the contents from before the first modification in this session.
    """

    def __init__(
        self,
        backup_dir: Path | str,
        storage: TextStorage | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self.backup_dir = Path(backup_dir)
        self.storage = storage if storage is not None else LocalTextStorage()
        self._notify = notify if notify is not None else logger.info
        self._backed_up: set[Path] = set()

    @property
    def backed_up(self) -> frozenset[Path]:
        return frozenset(self._backed_up)

    def backup_path_for(self, path: Path | str) -> Path:
        return self.backup_dir / f"{Path(path).name}{BACKUP_SUFFIX}"

    def add(self, path: Path | str, contents: str) -> None:
        path = Path(path)
        if path in self._backed_up:
            return
        dest = self.backup_path_for(path)
        self._notify(f"backing '{path}' up to '{dest}'")
        try:
            self.storage.ensure_dir(self.backup_dir)
            self.storage.write_text(dest, contents, create=True)
        except OSError as e:
            raise BackupError(
                f"Failed to back up shell rc file {path} to {dest}: {e}",
                path,
                "backup",
            ) from e
        self._backed_up.add(path)


def plan_patch(contents: str | None, patch: PatchSpec) -> PatchSpec:
    """Work out what still needs inserting into a file.

    ``contents`` is None when the file does not exist. Text already present
    anywhere in the file is dropped, and whatever is left is padded with
    newlines so it never runs into the surrounding lines.
    """
    prepend, append = patch.prepend, patch.append

    if contents is None:
        return PatchSpec(
            prepend=ensure_ends_with(prepend, "\n") if prepend else "",
            append=ensure_ends_with(append, "\n") if append else "",
        )

    if prepend:
        if prepend in contents:
            prepend = ""
        else:
            prepend = ensure_ends_with(prepend, "\n")

    if append:
        if append in contents:
            append = ""
        elif not contents.endswith("\n"):
            append = ensure_ends_with(ensure_starts_with(append, "\n"), "\n")
        else:
            append = ensure_ends_with(append, "\n")

    return replace(patch, prepend=prepend, append=append)


def _read_existing(rc: Path, storage: TextStorage) -> str | None:
    try:
        return storage.read_text(rc)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise RcFileError(f"Failed to read shell rc file: {rc}", rc, "read") from e


def update_rc_file(
    rc: Path | str,
    command: str | PatchSpec,
    backups: RcBackups,
    storage: TextStorage | None = None,
) -> bool:
    """Update an rc file (e.g. ``.bashrc``) with a command.

    If the file already contains the command it is left alone. Storage
    defaults to the one the backup manager writes to.

    Returns True if the file was written. A permission error on the final
    write also returns False, since some environments have a read-only home.
    """
    rc = Path(rc)
    storage = storage if storage is not None else backups.storage
    patch = PatchSpec.coerce(command)
    if patch.is_empty:
        return False

    contents = _read_existing(rc, storage)
    patch = plan_patch(contents, patch)
    if patch.is_empty:
        logger.debug("%s already up to date", rc)
        return False

    if contents is not None:
        backups.add(rc, contents)

    try:
        storage.ensure_dir(rc.parent)
    except OSError as e:
        raise RcFileError(
            f"Failed to create directory for shell rc file: {rc}", rc, "mkdir"
        ) from e

    try:
        storage.write_text(rc, patch.prepend + (contents or "") + patch.append, create=True)
    except OSError as e:
        if is_permission_error(e):
            logger.warning("Not permitted to update %s: %s", rc, e)
            return False
        raise RcFileError(f"Failed to update shell rc file: {rc}", rc, "write") from e

    logger.debug("Updated %s", rc)
    return True


def preview_rc_file(
    rc: Path | str,
    command: str | PatchSpec,
    storage: TextStorage | None = None,
) -> str:
    """Return a unified diff of what ``update_rc_file`` would write.

    Returns an empty string if nothing would change. Never writes.
    """
    rc = Path(rc)
    storage = storage if storage is not None else LocalTextStorage()
    patch = PatchSpec.coerce(command)
    if patch.is_empty:
        return ""

    contents = _read_existing(rc, storage)
    patch = plan_patch(contents, patch)
    if patch.is_empty:
        return ""

    original = contents or ""
    updated = patch.prepend + original + patch.append
    lines = list(difflib.unified_diff(
        original.splitlines(),
        updated.splitlines(),
        fromfile=f"a/{rc.name}",
        tofile=f"b/{rc.name}",
        lineterm="",
    ))
    return "\n".join(lines) + "\n" if lines else ""
