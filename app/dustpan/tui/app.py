"""Foreground loop of the interactive session.

Each tick reads the keys typed since the last tick, drains every queued
scan event, dispatches both to the controller, and redraws. Rendering
reads the controller snapshot only.
"""

import logging

from rich.console import Console
from rich.live import Live

from dustpan.controller import AppController
from dustpan.tui.keys import Key, KeyReader
from dustpan.tui.view import render

logger = logging.getLogger(__name__)

# Seconds to wait for input per tick; bounds the redraw latency.
TICK_SECONDS = 0.1


def run_session(
    controller: AppController,
    console: Console,
    reader: KeyReader | None = None,
) -> int:
    """Run the interactive session until the controller asks to exit.

    Args:
        controller: Session state machine, not yet started.
        console: Console that owns the terminal.
        reader: Key source. Defaults to a KeyReader on stdin.

    Returns:
        Process exit code chosen by the controller.
    """
    reader = reader or KeyReader()
    tick = 0

    try:
        controller.start()
        with (
            reader,
            Live(
                render(controller.snapshot(), height=console.height),
                console=console,
                screen=True,
                auto_refresh=False,
                transient=True,
            ) as live,
        ):
            while not controller.should_exit:
                for key in reader.read(TICK_SECONDS):
                    controller.dispatch(key)
                controller.poll()
                tick += 1
                live.update(
                    render(controller.snapshot(), tick=tick, height=console.height),
                    refresh=True,
                )
    except KeyboardInterrupt:
        controller.dispatch(Key.CTRL_C)
    finally:
        controller.shutdown()

    logger.info("Session ended in state %s", controller.state.value)
    return controller.exit_code
