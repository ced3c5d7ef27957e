"""Rich rendering of a session snapshot.

Pure functions from :class:`~dustpan.controller.SessionSnapshot` to Rich
renderables. Nothing here mutates session state.
"""

from datetime import UTC, datetime

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dustpan.controller import AppState, SessionSnapshot
from dustpan.deletion import DeletionSummary
from dustpan.utils.formatting import format_age, format_size

SPINNER_CHARS = "⠁⠂⠄⡀⢀⠠⠐⠈"

HELP_TEXT = (
    "q: quit | Esc: cancel/quit | ↑/↓: up/down | Space: toggle selection\n"
    "a/d: select/deselect all | c/Enter: clean selected"
)
CONFIGURE_HELP_TEXT = "q/Esc: quit | ↑/↓: up/down | Space: toggle | c/Enter: start scan"

# Rows taken by the header, footer, and panel borders
_CHROME_ROWS = 12


def render(
    snapshot: SessionSnapshot,
    *,
    tick: int = 0,
    height: int = 40,
    now: datetime | None = None,
) -> RenderableType:
    """Render one frame.

    Args:
        snapshot: Session state to draw.
        tick: Frame counter, drives the spinner.
        height: Terminal height, used to window the result list.
        now: Reference time for ages.

    Returns:
        Root renderable for the frame.
    """
    now = now or datetime.now(tz=UTC)

    layout = Layout()
    layout.split_column(
        Layout(render_header(snapshot, tick), name="header", size=3),
        Layout(name="body"),
        Layout(render_footer(snapshot), name="footer", size=5),
    )
    layout["body"].split_row(
        Layout(render_sidebar(snapshot), name="sidebar", ratio=3),
        Layout(render_main(snapshot, height=height, now=now), name="main", ratio=7),
    )
    return layout


def render_header(snapshot: SessionSnapshot, tick: int = 0) -> Panel:
    """Status line: state, root, and live scan progress."""
    progress = snapshot.progress
    if snapshot.state in (AppState.SCANNING, AppState.CONFIRM_STOP_SCAN):
        spinner = SPINNER_CHARS[tick % len(SPINNER_CHARS)]
        body = Text(f"{spinner} {progress.current_path or ''}", overflow="ellipsis", no_wrap=True)
    elif snapshot.state == AppState.STOPPING:
        body = Text("Please wait...")
    elif snapshot.state == AppState.CONFIGURING:
        body = Text("Choose the folders to look for", style="muted")
    else:
        line = (
            f"Scan completed {progress.scanned_count} folders, "
            f"found {progress.found_count} folders"
        )
        if progress.error_count:
            line += f" ({progress.error_count} unreadable)"
        body = Text(line)

    title = f"[bold_header]{snapshot.status}[/]: {escape(str(snapshot.root))}"
    return Panel(body, title=title, title_align="left", border_style="border")


def render_sidebar(snapshot: SessionSnapshot) -> Layout:
    """Target names and ignore patterns."""
    targets = Table.grid(padding=(0, 1))
    if snapshot.state == AppState.CONFIGURING:
        for index, choice in enumerate(snapshot.choices):
            mark = "[x]" if choice.checked else "[ ]"
            style = "cursor" if index == snapshot.choice_cursor else ""
            targets.add_row(Text(f"{mark} {choice.name}", style=style))
    else:
        for name in sorted(snapshot.config.target_names):
            targets.add_row(Text(f"[x] {name}"))

    ignores = Table.grid()
    for pattern in snapshot.config.ignore_globs:
        ignores.add_row(Text(pattern, style="muted"))

    sidebar = Layout()
    sidebar.split_column(
        Layout(Panel(targets, title="Folders to clean", border_style="border")),
        Layout(Panel(ignores, title="Ignore Patterns", border_style="border")),
    )
    return sidebar


def render_main(snapshot: SessionSnapshot, *, height: int, now: datetime) -> Panel:
    """Result list, or the summary/error panel once those states are reached."""
    if snapshot.state == AppState.DELETION_SUMMARY and snapshot.summary is not None:
        return render_summary(snapshot.summary)
    if snapshot.state == AppState.ERROR:
        body = Text(f"{snapshot.error}\n\nPress 'q' to exit.", style="error")
        return Panel(body, title="Error", border_style="error")

    registry = snapshot.registry
    title = "Directories to clean"
    if registry.selected_size > 0:
        title += f": {format_size(registry.selected_size)} selected"

    if not registry.entries:
        done = snapshot.state in (AppState.SELECTING, AppState.CONFIRM_DELETE)
        body: RenderableType = Text("No matching directories found" if done else "")
        return Panel(body, title=title, border_style="border")

    table = Table.grid(padding=(0, 1))
    table.add_column(width=3)
    table.add_column(justify="right", width=9)
    table.add_column(justify="right", width=9)
    table.add_column(overflow="ellipsis", no_wrap=True)

    rows = max(1, height - _CHROME_ROWS)
    start = _window_start(registry.cursor, len(registry.entries), rows)
    interactive = snapshot.state not in (AppState.SCANNING, AppState.STOPPING)
    for index in range(start, min(start + rows, len(registry.entries))):
        entry = registry.entries[index]
        mark = "[x]" if entry.selected else "[ ]"
        style = "selected" if entry.selected else "text"
        if interactive and index == registry.cursor:
            style = "cursor"
        table.add_row(
            Text(mark, style=style),
            Text(format_size(entry.size_bytes), style=style),
            Text(format_age(entry.last_modified, now), style=style),
            Text(f"→ {entry.path}", style=style),
        )

    footer = Text(
        f"{registry.selected_count} of {len(registry.entries)} selected, "
        f"{format_size(registry.total_size)} total",
        style="muted",
    )
    return Panel(Group(table, footer), title=title, border_style="border")


def render_summary(summary: DeletionSummary) -> Panel:
    """Deletion summary with any failures listed."""
    verb = "Would clean" if summary.dry_run else "Cleaned"
    lines = [
        Text(
            f"{verb} {summary.folders_moved} folders, "
            f"freeing {format_size(summary.bytes_freed)}.",
            style="success",
        )
    ]
    if summary.failures:
        lines.append(Text(f"\n{len(summary.failures)} could not be moved:", style="warning"))
        for path, reason in summary.failures:
            lines.append(Text(f"  {path}: {reason}", style="muted"))
    lines.append(Text("\nPress 'y' or 'enter' to exit."))
    return Panel(Group(*lines), title="Deletion Complete", border_style="success")


def render_footer(snapshot: SessionSnapshot) -> Panel:
    """Confirmation dialog when one is open, key help otherwise."""
    if snapshot.prompt is not None:
        return Panel(
            Text(snapshot.prompt, justify="center", style="bold"),
            title="Confirm Action",
            border_style="error",
            style="dialog",
        )
    help_text = CONFIGURE_HELP_TEXT if snapshot.state == AppState.CONFIGURING else HELP_TEXT
    if snapshot.dry_run:
        help_text += " | dry run: nothing is moved"
    return Panel(Text(help_text), title="Instructions", border_style="info")


def _window_start(cursor: int, total: int, rows: int) -> int:
    """First visible row so that the cursor stays on screen."""
    if total <= rows:
        return 0
    start = cursor - rows // 2
    return max(0, min(start, total - rows))
