"""rcpatch CLI: register commands in shell rc files, safely."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from rcpatch import __version__
from rcpatch.config import RcPatchConfig
from rcpatch.errors import RcPatchError
from rcpatch.rc_files import PatchSpec, RcBackups, preview_rc_file, update_rc_file

console = Console()
logger = logging.getLogger("rcpatch")

HELP_TEXT = """\
RCPATCH(1)                       User Commands                      RCPATCH(1)

NAME
    rcpatch - register commands in shell rc files, safely

SYNOPSIS
    rcpatch <command> [options] [arguments]

DESCRIPTION
    rcpatch adds lines to the start and/or end of shell startup files such
    as ~/.bashrc or ~/.zshrc. It is idempotent: text already present in a
    file is never added twice, so installers can run it on every upgrade.

    Before an existing file is changed for the first time in a run, its
    contents are copied to the backup directory as <name>.bak. Files that
    do not exist yet are created, along with their parent directories.

COMMANDS
    apply <rc>... [--prepend TEXT] [--append TEXT] [--backup-dir DIR]
        Patch one or more rc files. Relative names are resolved against
        the home directory. Files are patched one after the other; a
        failure part way through leaves earlier files patched.

            rcpatch apply .bashrc --append 'export PATH="$HOME/.tool/bin:$PATH"'
            rcpatch apply .bashrc .zshrc --prepend '. "$HOME/.tool/env"'

    diff <rc> [--prepend TEXT] [--append TEXT]
        Show what 'apply' would change without writing anything.

            rcpatch diff .zshrc --append 'eval "$(tool completions zsh)"'

    help [TOPIC]
        Show this help page, or the help for a single command.

ENVIRONMENT VARIABLES
    RCPATCH_HOME
        Base directory for rcpatch data (default: ~/.rcpatch).

    RCPATCH_HOME_DIR
        Directory that relative rc names resolve against (default: $HOME).

    RCPATCH_LOG_LEVEL
        Logging level for the log file and console (default: INFO).

FILES
    ~/.rcpatch/backups/     Backups of rc files taken before patching
    ~/.rcpatch/rcpatch.log  Activity log

EXIT STATUS
    0 on success, including when files were already up to date or could
    not be written because of permissions. 1 on any other failure.

VERSION
    rcpatch {version}

RCPATCH(1)                       User Commands                      RCPATCH(1)
""".format(version=__version__)


def _setup_logging(config: RcPatchConfig) -> None:
    """Configure file + console logging, replacing any earlier setup."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(config.log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)
    logger.addHandler(console_handler)

    logger.setLevel(config.log_level)


def get_config() -> RcPatchConfig:
    config = RcPatchConfig.from_env()
    config.ensure_dirs()
    _setup_logging(config)
    return config


def _patch_from_options(prepend: str | None, append: str | None) -> PatchSpec:
    return PatchSpec(prepend=prepend or "", append=append or "")


@click.group()
@click.version_option(package_name="rcpatch")
def cli() -> None:
    """rcpatch - register commands in shell rc files, safely.

    Run 'rcpatch help' for full documentation.
    """


@cli.command()
@click.argument("topic", required=False, default=None)
def help(topic: str | None) -> None:
    """Show detailed help. Optionally specify a command name for targeted help."""
    if topic is None:
        click.echo_via_pager(HELP_TEXT)
        return

    cmd = cli.get_command(None, topic)  # type: ignore[arg-type]
    if cmd is not None:
        with click.Context(cmd, info_name=f"rcpatch {topic}") as sub_ctx:
            click.echo(cmd.get_help(sub_ctx))
        return

    console.print(f"[yellow]Unknown topic: '{escape(topic)}'. Run 'rcpatch help' for full documentation.[/]")


@cli.command()
@click.argument("rc_files", nargs=-1, required=True)
@click.option("--prepend", "-p", default=None, help="Text to insert at the start of each file")
@click.option("--append", "-a", default=None, help="Text to insert at the end of each file")
@click.option(
    "--backup-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where to keep backups (default: ~/.rcpatch/backups)",
)
def apply(
    rc_files: tuple[str, ...],
    prepend: str | None,
    append: str | None,
    backup_dir: Path | None,
) -> None:
    """Add text to shell rc files, backing them up first."""
    config = get_config()
    patch = _patch_from_options(prepend, append)
    if patch.is_empty:
        console.print("[yellow]Nothing to do: pass --prepend and/or --append[/]")
        return

    backups = RcBackups(backup_dir or config.backup_dir, notify=lambda msg: console.print(f"[dim]{escape(msg)}[/]"))

    table = Table(title="Shell rc files")
    table.add_column("File", style="bold")
    table.add_column("Result")

    for name in rc_files:
        rc = config.resolve_rc(name)
        try:
            changed = update_rc_file(rc, patch, backups)
        except RcPatchError as e:
            logger.error("%s", e)
            console.print(table)
            console.print(f"[red]{escape(str(e))}[/]")
            sys.exit(1)
        logger.info("%s: %s", rc, "updated" if changed else "unchanged")
        table.add_row(escape(str(rc)), "[green]updated[/]" if changed else "[dim]unchanged[/]")

    console.print(table)


@cli.command()
@click.argument("rc_file")
@click.option("--prepend", "-p", default=None, help="Text to insert at the start of the file")
@click.option("--append", "-a", default=None, help="Text to insert at the end of the file")
def diff(rc_file: str, prepend: str | None, append: str | None) -> None:
    """Show what 'apply' would change, without writing."""
    config = get_config()
    rc = config.resolve_rc(rc_file)
    patch = _patch_from_options(prepend, append)
    if patch.is_empty:
        console.print("[yellow]Nothing to do: pass --prepend and/or --append[/]")
        return

    try:
        text = preview_rc_file(rc, patch)
    except RcPatchError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        sys.exit(1)

    if not text:
        console.print(f"[green]{escape(str(rc))} is already up to date[/]")
        return
    console.print(Syntax(text, "diff", theme="ansi_dark"))
