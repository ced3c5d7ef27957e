"""Background scan worker.

Runs a ScanEngine on a dedicated daemon thread and hands its events to
the foreground through a FIFO queue. The worker never touches the
registry; the foreground drains the queue and applies events itself.
The only state shared with the foreground is the engine's cancellation
signal.
"""

import logging
import queue
import threading

from dustpan.scan.engine import ScanEngine
from dustpan.scan.models import ScanEvent, ScanFailed

logger = logging.getLogger(__name__)


class ScanWorker:
    """Owns the scan thread and its event channel.

    Args:
        engine: The engine to run. Its cancellation signal doubles as the
            worker's stop handle.
    """

    def __init__(self, engine: ScanEngine) -> None:
        self._engine = engine
        self._events: queue.Queue[ScanEvent] = queue.Queue()
        self._thread: threading.Thread | None = None

    @property
    def cancel(self) -> threading.Event:
        """The cancellation signal shared with the engine."""
        return self._engine.cancel

    def start(self) -> None:
        """Start scanning on a background thread.

        Raises:
            RuntimeError: If the worker was already started.
        """
        if self._thread is not None:
            msg = "Scan worker already started"
            raise RuntimeError(msg)
        self._thread = threading.Thread(target=self._run, name="dustpan-scan", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Ask the engine to stop; returns immediately."""
        self._engine.cancel.set()

    def drain(self) -> list[ScanEvent]:
        """Return every event queued so far, oldest first, without blocking."""
        events: list[ScanEvent] = []
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the scan thread to finish.

        Returns:
            True if the thread is no longer running.
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        """Whether the scan thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        try:
            for event in self._engine.scan():
                self._events.put(event)
        except Exception as e:
            # Unexpected faults end the scan as an event, never as a raw exception
            logger.exception("Scan worker failed")
            self._events.put(ScanFailed(message=f"Scan failed: {e}"))
