"""Shared test fixtures."""

from pathlib import Path

import pytest

from rcpatch.config import RcPatchConfig
from rcpatch.rc_files import RcBackups
from rcpatch.storage import MemoryTextStorage

BACKUP_DIR = "/test/backups"


@pytest.fixture
def storage() -> MemoryTextStorage:
    """A fresh in-memory filesystem for each test."""
    return MemoryTextStorage()


@pytest.fixture
def notices() -> list[str]:
    return []


@pytest.fixture
def backups(storage: MemoryTextStorage, notices: list[str]) -> RcBackups:
    return RcBackups(BACKUP_DIR, storage=storage, notify=notices.append)


@pytest.fixture
def config(tmp_path: Path) -> RcPatchConfig:
    cfg = RcPatchConfig(home_dir=tmp_path / "home", base_dir=tmp_path / "rcpatch")
    cfg.home_dir.mkdir()
    cfg.ensure_dirs()
    return cfg
