"""Interactive session state machine.

The controller owns the session state, the folder registry, and the
scan worker. Every input, whether a key press from the foreground loop
or an event drained from the scan worker, goes through
:meth:`AppController.dispatch`, the single transition function. The
renderer only ever reads :meth:`AppController.snapshot`.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dustpan.deletion import DeletionExecutor, DeletionSummary
from dustpan.errors import DustpanError
from dustpan.registry import FolderRegistry, RegistrySnapshot
from dustpan.scan.engine import ScanEngine
from dustpan.scan.models import (
    Completed,
    FolderFound,
    Progress,
    ScanConfig,
    ScanEvent,
    ScanFailed,
    ScanProgress,
    Stopped,
)
from dustpan.scan.worker import ScanWorker
from dustpan.tui.keys import Key

logger = logging.getLogger(__name__)

EngineFactory = Callable[[Path, ScanConfig, threading.Event], ScanEngine]

# Tuples compare with ==, so plain strings match Key members
_CONFIRM_KEYS: tuple[str, ...] = ("Y", "y", Key.ENTER)
_DENY_KEYS: tuple[str, ...] = ("N", "n", Key.ESCAPE)
_HARD_QUIT_KEYS: tuple[str, ...] = ("q", Key.CTRL_C)


class AppState(str, Enum):
    """Session states.

    Attributes:
        CONFIGURING: Optional target-name checklist shown before scanning.
        SCANNING: Scan running; results stream into the registry.
        CONFIRM_STOP_SCAN: Stop dialog open; the scan keeps running.
        STOPPING: Stop requested; waiting for the worker to acknowledge.
        SELECTING: Scan finished; the registry is frozen and editable.
        CONFIRM_DELETE: Trash dialog open.
        DELETION_SUMMARY: Batch finished; waiting for acknowledgement.
        ERROR: Unrecoverable fault; only quitting is possible.
    """

    CONFIGURING = "configuring"
    SCANNING = "scanning"
    CONFIRM_STOP_SCAN = "confirm_stop_scan"
    STOPPING = "stopping"
    SELECTING = "selecting"
    CONFIRM_DELETE = "confirm_delete"
    DELETION_SUMMARY = "deletion_summary"
    ERROR = "error"


STATUS_TEXT: dict[AppState, str] = {
    AppState.CONFIGURING: "Configure",
    AppState.SCANNING: "Scanning",
    AppState.CONFIRM_STOP_SCAN: "Scanning",
    AppState.STOPPING: "Stopping",
    AppState.SELECTING: "Scanned",
    AppState.CONFIRM_DELETE: "Scanned",
    AppState.DELETION_SUMMARY: "Deletion Complete",
    AppState.ERROR: "Error",
}

STOP_SCAN_PROMPT = "Stop the current scan? (Y/n)"
DELETE_PROMPT = "Move {n} selected items to trash? (Y/n)"


@dataclass(frozen=True, slots=True)
class TargetChoice:
    """A target name in the configuration checklist."""

    name: str
    checked: bool = True


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Everything the renderer may read for one frame.

    Attributes:
        state: Current session state.
        status: Status text for the current state.
        root: Scan root.
        config: Scan configuration in effect.
        progress: Latest scan counters.
        registry: Read-only registry view.
        prompt: Dialog prompt, or None when no dialog is open.
        summary: Deletion summary once a batch has run.
        error: Error message in the ERROR state.
        choices: Target checklist (CONFIGURING only).
        choice_cursor: Highlighted checklist row.
        dry_run: Whether deletions are simulated.
    """

    state: AppState
    status: str
    root: Path
    config: ScanConfig
    progress: ScanProgress
    registry: RegistrySnapshot
    prompt: str | None
    summary: DeletionSummary | None
    error: str | None
    choices: tuple[TargetChoice, ...]
    choice_cursor: int
    dry_run: bool


class AppController:
    """State machine coordinating scanning, selection, and deletion.

    Args:
        root: Validated scan root.
        config: Target names and ignore globs.
        registry: Registry to fill. Defaults to a registry with the
            30-day auto-select threshold.
        executor: Deletion executor bound to ``registry``. Defaults to a
            send2trash-backed executor.
        configure: Start in CONFIGURING instead of SCANNING.
        dry_run: Passed to the default executor.
        engine_factory: Builds the scan engine; tests inject fakes.
    """

    def __init__(
        self,
        root: Path,
        config: ScanConfig,
        *,
        registry: FolderRegistry | None = None,
        executor: DeletionExecutor | None = None,
        configure: bool = False,
        dry_run: bool = False,
        engine_factory: EngineFactory = ScanEngine,
    ) -> None:
        self._root = root
        self._config = config
        self._registry = registry if registry is not None else FolderRegistry()
        self._executor = (
            executor
            if executor is not None
            else DeletionExecutor(self._registry, dry_run=dry_run)
        )
        self._engine_factory = engine_factory

        self._cancel = threading.Event()
        self._worker: ScanWorker | None = None
        self._progress = ScanProgress()
        self._summary: DeletionSummary | None = None
        self._error: str | None = None
        self._choices = [TargetChoice(name) for name in sorted(config.target_names)]
        self._choice_cursor = 0

        self._state = AppState.CONFIGURING if configure else AppState.SCANNING
        self._should_exit = False
        self._exit_code = 0

    # -- read side ----------------------------------------------------------

    @property
    def state(self) -> AppState:
        """Current session state."""
        return self._state

    @property
    def registry(self) -> FolderRegistry:
        """The folder registry (foreground use only)."""
        return self._registry

    @property
    def cancel(self) -> threading.Event:
        """Cancellation signal shared with the scan engine."""
        return self._cancel

    @property
    def progress(self) -> ScanProgress:
        """Latest scan counters."""
        return self._progress

    @property
    def summary(self) -> DeletionSummary | None:
        """Deletion summary, once a batch has run."""
        return self._summary

    @property
    def error(self) -> str | None:
        """Error message in the ERROR state."""
        return self._error

    @property
    def should_exit(self) -> bool:
        """Whether the session has ended."""
        return self._should_exit

    @property
    def exit_code(self) -> int:
        """Process exit code for the ended session."""
        return self._exit_code

    @property
    def status_text(self) -> str:
        """Status text for the current state."""
        return STATUS_TEXT[self._state]

    @property
    def prompt(self) -> str | None:
        """Dialog prompt for the current state, if a dialog is open."""
        if self._state == AppState.CONFIRM_STOP_SCAN:
            return STOP_SCAN_PROMPT
        if self._state == AppState.CONFIRM_DELETE:
            return DELETE_PROMPT.format(n=self._registry.selected_count())
        return None

    def snapshot(self) -> SessionSnapshot:
        """Build the read-only view for the renderer."""
        return SessionSnapshot(
            state=self._state,
            status=self.status_text,
            root=self._root,
            config=self._config,
            progress=self._progress,
            registry=self._registry.snapshot(),
            prompt=self.prompt,
            summary=self._summary,
            error=self._error,
            choices=tuple(self._choices),
            choice_cursor=self._choice_cursor,
            dry_run=self._executor.dry_run,
        )

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Begin the session: scan right away unless configuring first."""
        if self._state == AppState.SCANNING:
            try:
                self._start_scan(self._config)
            except DustpanError as e:
                self._fail(str(e))
            except Exception as e:
                logger.exception("Unexpected error starting the scan")
                self._fail(f"Unexpected error: {e}")

    def poll(self) -> int:
        """Drain every queued scan event and dispatch it, oldest first.

        Returns:
            Number of events dispatched.
        """
        if self._worker is None:
            return 0
        events = self._worker.drain()
        for event in events:
            self.dispatch(event)
        return len(events)

    def shutdown(self, timeout: float = 1.0) -> None:
        """Stop the scan worker, if any, and wait briefly for it."""
        self._cancel.set()
        if self._worker is not None and not self._worker.join(timeout):
            logger.warning("Scan worker did not stop within %.1fs", timeout)

    # -- transitions --------------------------------------------------------

    def dispatch(self, message: str | ScanEvent) -> None:
        """Apply one key press or scan event to the session.

        Unexpected faults never escape: they are logged and move the
        session to the ERROR state.

        Args:
            message: A key (see :class:`~dustpan.tui.keys.Key`) or a scan event.
        """
        if self._should_exit:
            return
        previous = self._state
        try:
            if isinstance(message, str):
                self._handle_key(message)
            else:
                self._handle_event(message)
        except Exception as e:
            logger.exception("Unexpected error in state %s", self._state.value)
            self._fail(f"Unexpected error: {e}")
        if self._state != previous:
            logger.debug("State %s -> %s", previous.value, self._state.value)

    def _handle_event(self, event: ScanEvent) -> None:
        if self._state not in (AppState.SCANNING, AppState.CONFIRM_STOP_SCAN, AppState.STOPPING):
            logger.debug("Ignoring %s in state %s", type(event).__name__, self._state.value)
            return

        match event:
            case Progress(progress=progress):
                self._progress = progress
            case FolderFound(entry=entry):
                self._registry.insert(entry)
            case Completed(progress=progress) | Stopped(progress=progress):
                self._progress = progress
                self._freeze()
            case ScanFailed(message=message):
                self._fail(message)

    def _handle_key(self, key: str) -> None:
        if key == Key.CTRL_C:
            self._quit()
            return

        match self._state:
            case AppState.CONFIGURING:
                self._on_configuring_key(key)
            case AppState.SCANNING:
                if key == "q":
                    self._quit()
                elif key == Key.ESCAPE:
                    self._state = AppState.CONFIRM_STOP_SCAN
            case AppState.CONFIRM_STOP_SCAN:
                if key in _HARD_QUIT_KEYS:
                    self._quit()
                elif key in _CONFIRM_KEYS:
                    self._cancel.set()
                    self._state = AppState.STOPPING
                elif key in _DENY_KEYS:
                    self._state = AppState.SCANNING
            case AppState.STOPPING:
                if key in _HARD_QUIT_KEYS:
                    self._quit()
            case AppState.SELECTING:
                self._on_selecting_key(key)
            case AppState.CONFIRM_DELETE:
                if key in _HARD_QUIT_KEYS:
                    self._quit()
                elif key in _CONFIRM_KEYS:
                    self._delete_selected()
                elif key in _DENY_KEYS:
                    self._state = AppState.SELECTING
            case AppState.DELETION_SUMMARY:
                if key in _CONFIRM_KEYS or key in ("q", Key.ESCAPE):
                    self._quit(1 if self._summary is not None and self._summary.failed else 0)
            case AppState.ERROR:
                if key in ("q", Key.ESCAPE):
                    self._quit(1)

    def _on_configuring_key(self, key: str) -> None:
        if key in ("q", Key.ESCAPE):
            self._quit()
        elif key == Key.UP:
            self._choice_cursor = max(0, self._choice_cursor - 1)
        elif key == Key.DOWN:
            self._choice_cursor = min(len(self._choices) - 1, self._choice_cursor + 1)
        elif key == Key.SPACE and self._choices:
            choice = self._choices[self._choice_cursor]
            self._choices[self._choice_cursor] = TargetChoice(choice.name, not choice.checked)
        elif key in ("c", Key.ENTER):
            names = frozenset(c.name for c in self._choices if c.checked)
            if not names:
                return
            self._config = self._config.model_copy(update={"target_names": names})
            self._state = AppState.SCANNING
            self._start_scan(self._config)

    def _on_selecting_key(self, key: str) -> None:
        if key in ("q", Key.ESCAPE):
            self._quit()
        elif key == Key.UP:
            self._registry.move_cursor(-1)
        elif key == Key.DOWN:
            self._registry.move_cursor(1)
        elif key == Key.SPACE:
            self._registry.toggle(self._registry.cursor)
        elif key == "a":
            self._registry.select_all()
        elif key == "d":
            self._registry.deselect_all()
        elif key in ("c", Key.ENTER):
            if self._registry.selected_count() > 0:
                self._state = AppState.CONFIRM_DELETE

    # -- effects ------------------------------------------------------------

    def _start_scan(self, config: ScanConfig) -> None:
        self._registry.clear()
        self._progress = ScanProgress()
        self._cancel.clear()
        engine = self._engine_factory(self._root, config, self._cancel)
        self._worker = ScanWorker(engine)
        self._worker.start()

    def _freeze(self) -> None:
        """End of scan: re-apply the auto-select rule and allow selection."""
        newly = self._registry.auto_select()
        if newly:
            logger.debug("Auto-selected %d more entries at scan end", newly)
        self._state = AppState.SELECTING

    def _delete_selected(self) -> None:
        paths = self._registry.selected_paths()
        self._summary = self._executor.execute(paths)
        self._state = AppState.DELETION_SUMMARY

    def _fail(self, message: str) -> None:
        self._cancel.set()
        self._error = message
        self._state = AppState.ERROR

    def _quit(self, exit_code: int = 0) -> None:
        self._cancel.set()
        self._should_exit = True
        self._exit_code = exit_code
