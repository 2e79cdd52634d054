"""Global configuration for rcpatch."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_home_dir() -> Path:
    return Path(os.environ.get("RCPATCH_HOME_DIR", Path.home()))


def _default_base_dir() -> Path:
    return Path(os.environ.get("RCPATCH_HOME", Path.home() / ".rcpatch"))


@dataclass
class RcPatchConfig:
    home_dir: Path = field(default_factory=_default_home_dir)
    base_dir: Path = field(default_factory=_default_base_dir)
    log_level: int = logging.INFO

    @property
    def backup_dir(self) -> Path:
        return self.base_dir / "backups"

    @property
    def log_path(self) -> Path:
        return self.base_dir / "rcpatch.log"

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def resolve_rc(self, name: str | Path) -> Path:
        """Resolve an rc file name like ``.bashrc`` against the home directory."""
        text = str(name)
        if text == "~" or text.startswith("~/"):
            return self.home_dir / text[2:]
        path = Path(text)
        if path.is_absolute():
            return path
        return self.home_dir / path

    @classmethod
    def from_env(cls) -> RcPatchConfig:
        """Load config from environment variables."""
        config = cls()
        if level := os.environ.get("RCPATCH_LOG_LEVEL"):
            resolved = logging.getLevelName(level.upper())
            if isinstance(resolved, int):
                config.log_level = resolved
        return config
