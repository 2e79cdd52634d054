"""Tests for the rcpatch CLI."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console

from rcpatch.cli import _setup_logging, cli
from rcpatch.config import RcPatchConfig


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RCPATCH_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("RCPATCH_HOME_DIR", str(tmp_path / "home"))
    (tmp_path / "home").mkdir()
    # wide enough that long tmp paths never wrap
    monkeypatch.setattr("rcpatch.cli.console", Console(width=500))
    yield
    rcpatch_logger = logging.getLogger("rcpatch")
    for handler in list(rcpatch_logger.handlers):
        rcpatch_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def bashrc(tmp_path: Path) -> Path:
    rc = tmp_path / "home" / ".bashrc"
    rc.write_text("echo 'x'", encoding="utf-8")
    return rc


class TestApply:
    def test_appends_and_backs_up(self, runner: CliRunner, bashrc: Path, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["apply", ".bashrc", "--append", "install tool"])

        assert result.exit_code == 0, result.output
        assert "updated" in result.output
        assert bashrc.read_text(encoding="utf-8") == "echo 'x'\ninstall tool\n"
        backup = tmp_path / "data" / "backups" / ".bashrc.bak"
        assert backup.read_text(encoding="utf-8") == "echo 'x'"

    def test_second_run_unchanged(self, runner: CliRunner, bashrc: Path) -> None:
        runner.invoke(cli, ["apply", ".bashrc", "-a", "install tool"])
        result = runner.invoke(cli, ["apply", ".bashrc", "-a", "install tool"])

        assert result.exit_code == 0, result.output
        assert "unchanged" in result.output
        assert bashrc.read_text(encoding="utf-8") == "echo 'x'\ninstall tool\n"

    def test_several_files(self, runner: CliRunner, bashrc: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["apply", ".bashrc", ".config/fish/config.fish", "-p", "source env"]
        )

        assert result.exit_code == 0, result.output
        assert bashrc.read_text(encoding="utf-8") == "source env\necho 'x'"
        fish = tmp_path / "home" / ".config" / "fish" / "config.fish"
        assert fish.read_text(encoding="utf-8") == "source env\n"

    def test_custom_backup_dir(self, runner: CliRunner, bashrc: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["apply", str(bashrc), "-a", "x2", "--backup-dir", str(tmp_path / "bk")]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "bk" / ".bashrc.bak").read_text(encoding="utf-8") == "echo 'x'"

    def test_nothing_to_do(self, runner: CliRunner, bashrc: Path) -> None:
        result = runner.invoke(cli, ["apply", ".bashrc"])

        assert result.exit_code == 0
        assert "Nothing to do" in result.output
        assert bashrc.read_text(encoding="utf-8") == "echo 'x'"

    def test_fatal_error_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "home" / ".zshrc").mkdir()

        result = runner.invoke(cli, ["apply", ".zshrc", "-a", "x"])

        assert result.exit_code == 1
        assert "Failed to read shell rc file" in result.output

    def test_writes_log_file(self, runner: CliRunner, bashrc: Path, tmp_path: Path) -> None:
        runner.invoke(cli, ["apply", ".bashrc", "-a", "install tool"])

        log = (tmp_path / "data" / "rcpatch.log").read_text(encoding="utf-8")
        assert "updated" in log


class TestDiff:
    def test_shows_change_without_writing(self, runner: CliRunner, bashrc: Path) -> None:
        result = runner.invoke(cli, ["diff", ".bashrc", "-a", "install tool"])

        assert result.exit_code == 0, result.output
        assert "+install tool" in result.output
        assert bashrc.read_text(encoding="utf-8") == "echo 'x'"

    def test_up_to_date(self, runner: CliRunner, bashrc: Path) -> None:
        result = runner.invoke(cli, ["diff", ".bashrc", "-a", "echo"])

        assert result.exit_code == 0
        assert "already up to date" in result.output

    def test_nothing_to_do(self, runner: CliRunner, bashrc: Path) -> None:
        result = runner.invoke(cli, ["diff", ".bashrc"])

        assert result.exit_code == 0
        assert "Nothing to do" in result.output
        assert "up to date" not in result.output


class TestHelp:
    def test_full_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["help"])
        assert result.exit_code == 0
        assert "RCPATCH(1)" in result.output

    def test_command_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["help", "apply"])
        assert result.exit_code == 0
        assert "--backup-dir" in result.output

    def test_unknown_topic(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["help", "bogus"])
        assert "Unknown topic" in result.output


class TestLogging:
    def test_setup_replaces_earlier_config(self, tmp_path: Path) -> None:
        first = RcPatchConfig(home_dir=tmp_path, base_dir=tmp_path / "one", log_level=logging.INFO)
        second = RcPatchConfig(home_dir=tmp_path, base_dir=tmp_path / "two", log_level=logging.DEBUG)
        first.ensure_dirs()
        second.ensure_dirs()

        _setup_logging(first)
        _setup_logging(second)

        rcpatch_logger = logging.getLogger("rcpatch")
        assert rcpatch_logger.level == logging.DEBUG
        file_handlers = [h for h in rcpatch_logger.handlers if isinstance(h, logging.FileHandler)]
        assert [Path(h.baseFilename) for h in file_handlers] == [second.log_path]
        assert len(rcpatch_logger.handlers) == 2
