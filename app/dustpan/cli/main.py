"""Main CLI application entry point.

Defines the Typer application: one optional ROOT argument plus options
that shape the scan. By default an interactive session is started;
``--report`` prints the results instead.
"""

import logging
import sys
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from dustpan import __version__
from dustpan.cli.report import run_report
from dustpan.controller import AppController
from dustpan.core.paths import ensure_state_dir, get_log_path
from dustpan.errors import ScanRootError
from dustpan.registry import FolderRegistry
from dustpan.scan.engine import validate_root
from dustpan.scan.models import ScanConfig
from dustpan.scan.patterns import DEFAULT_IGNORE_GLOBS, DEFAULT_TARGET_NAMES
from dustpan.tui.app import run_session
from dustpan.utils.formatting import apply_theme, console, print_error

app = typer.Typer(
    name="dustpan",
    help="Find stale build-artifact folders and move them to the trash.",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


class OutputFormat(str, Enum):
    """Output format options for --report."""

    TABLE = "table"
    JSON = "json"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dustpan version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send log records to the session log file.

    The interactive session owns the terminal, so records never go to
    stdout or stderr. Falls back to discarding records when the state
    directory cannot be created.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    try:
        ensure_state_dir()
        handler: logging.Handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    except (OSError, RuntimeError):
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def build_config(
    targets: list[str] | None,
    ignores: list[str] | None,
    no_ignore: bool,
) -> ScanConfig:
    """Build the scan configuration from CLI options.

    Args:
        targets: --target values, or None for the built-in target names.
        ignores: --ignore values, or None for the built-in ignore globs.
        no_ignore: Disable all ignore globs.

    Returns:
        Validated ScanConfig.

    Raises:
        ValidationError: If a target name or pattern is invalid.
    """
    target_names = frozenset(targets) if targets else frozenset(DEFAULT_TARGET_NAMES)
    if no_ignore:
        ignore_globs: tuple[str, ...] = ()
    elif ignores:
        ignore_globs = tuple(ignores)
    else:
        ignore_globs = DEFAULT_IGNORE_GLOBS
    return ScanConfig(target_names=target_names, ignore_globs=ignore_globs)


@app.command()
def main(
    root: Annotated[
        Path,
        typer.Argument(help="Directory to scan (default: current directory)."),
    ] = Path("."),
    targets: Annotated[
        list[str] | None,
        typer.Option(
            "--target",
            "-t",
            help="Folder name to look for (repeatable; default: node_modules, target).",
        ),
    ] = None,
    ignores: Annotated[
        list[str] | None,
        typer.Option(
            "--ignore",
            "-i",
            help="Glob of folders to skip entirely (repeatable; default: '.*').",
        ),
    ] = None,
    no_ignore: Annotated[
        bool,
        typer.Option("--no-ignore", help="Do not skip any folders."),
    ] = False,
    older_than: Annotated[
        int,
        typer.Option(
            "--older-than",
            min=0,
            help="Preselect folders not modified for more than this many days.",
        ),
    ] = 30,
    configure: Annotated[
        bool,
        typer.Option("--configure", help="Choose target folders before scanning."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be moved to the trash."),
    ] = False,
    report: Annotated[
        bool,
        typer.Option("--report", help="Print results instead of starting a session."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Report output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Write debug output to the log file."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Scan ROOT for build-artifact folders and move the chosen ones to the trash.

    Results are listed oldest first; folders older than --older-than days
    are preselected.
    """
    configure_logging(verbose)
    apply_theme()

    try:
        config = build_config(targets, ignores, no_ignore)
    except ValidationError as e:
        print_error(f"Invalid scan options: {e}")
        raise typer.Exit(code=2) from e

    try:
        resolved = validate_root(root)
    except ScanRootError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    threshold = timedelta(days=older_than)

    if report:
        exit_code = run_report(
            resolved,
            config,
            threshold,
            json_output=output_format == OutputFormat.JSON,
        )
        raise typer.Exit(code=exit_code)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print_error("Interactive mode needs a terminal; use --report to print results.")
        raise typer.Exit(code=2)

    controller = AppController(
        resolved,
        config,
        registry=FolderRegistry(auto_select_after=threshold),
        configure=configure,
        dry_run=dry_run,
    )
    exit_code = run_session(controller, console)
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
