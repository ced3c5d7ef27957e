"""Non-interactive scan report.

Runs the scan engine in the foreground, fills a registry with the same
ordering and preselection rules as the interactive session, and prints
the result as a Rich table or as JSON. Nothing is moved to the trash.
"""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from dustpan.registry import FolderRegistry
from dustpan.scan.engine import ScanEngine
from dustpan.scan.models import Completed, FolderFound, ScanConfig, ScanProgress, Stopped
from dustpan.utils.formatting import (
    age_in_days,
    console,
    err_console,
    format_age,
    format_size,
    print_success,
    print_warning,
)


def run_report(
    root: Path,
    config: ScanConfig,
    threshold: timedelta,
    *,
    json_output: bool = False,
) -> int:
    """Scan ``root`` and print the matches, oldest first.

    Args:
        root: Validated scan root.
        config: Target names and ignore globs.
        threshold: Auto-select threshold used for the Selected column.
        json_output: Print JSON instead of a table.

    Returns:
        Process exit code (always 0; root errors are raised before this).
    """
    registry = FolderRegistry(auto_select_after=threshold)
    engine = ScanEngine(root, config)
    progress = ScanProgress()

    with err_console.status("Scanning...") as status:
        for event in engine.scan():
            match event:
                case FolderFound(entry=entry):
                    registry.insert(entry)
                    status.update(f"Scanning... {len(registry)} found")
                case Completed(progress=final) | Stopped(progress=final):
                    progress = final
    registry.auto_select()

    if json_output:
        _print_json(registry)
        return 0

    if len(registry) == 0:
        print_success(f"Nothing to clean under {root}.")
        return 0

    _print_table(registry, root, threshold)
    console.print(
        f"\n[dim]Scanned {progress.scanned_count} folders, found {len(registry)} "
        f"({format_size(registry.total_size())} total, "
        f"{format_size(registry.total_selected_size())} older than {threshold.days} days)[/dim]"
    )
    if progress.error_count:
        print_warning(f"{progress.error_count} entries could not be read.")
    return 0


def _print_table(registry: FolderRegistry, root: Path, threshold: timedelta) -> None:
    """Display entries as a Rich table."""
    table = Table(
        title=f"Build Artifacts under {escape(str(root))}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=3, justify="center")
    table.add_column("Age", justify="right", width=10)
    table.add_column("Size", justify="right", width=10)
    table.add_column("Path", style="bold")

    now = datetime.now(tz=UTC)
    for entry in registry:
        mark = "[selected]●[/]" if entry.selected else "[muted]○[/]"
        age_style = "stale" if now - entry.last_modified > threshold else "fresh"
        table.add_row(
            mark,
            f"[{age_style}]{format_age(entry.last_modified, now)}[/]",
            format_size(entry.size_bytes),
            escape(entry.path),
        )

    console.print(table)


def _print_json(registry: FolderRegistry) -> None:
    """Display entries as JSON."""
    now = datetime.now(tz=UTC)
    data = [
        {
            "path": entry.path,
            "size_bytes": entry.size_bytes,
            "last_modified": entry.last_modified.isoformat(),
            "age_days": age_in_days(entry.last_modified, now),
            "selected": entry.selected,
        }
        for entry in registry
    ]
    console.print_json(json.dumps(data))
