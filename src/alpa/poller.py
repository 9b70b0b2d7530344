"""Hotkey poller: samples held keys every tick and dispatches commands."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Sequence

from alpa.command import Cancel, Command, GenerateSpec, select_command
from alpa.keycode import Keycode
from alpa.state import DispatchState

logger = logging.getLogger(__name__)

# Sampling period.  This bounds how late a chord can be noticed; it is not an
# exact timing guarantee.
POLL_INTERVAL = 0.010

# How often a blocked put re-checks whether the poller was stopped.
_PUT_RETRY = 0.1


class HotkeyPoller:
    """Polls keyboard state on a dedicated thread and feeds the coordinator.

    Generate commands go through *channel*, a ``queue.Queue(maxsize=1)``.
    A put on a full channel blocks this thread until the coordinator takes
    the pending spec, so at most one request is ever waiting.  Cancel
    commands bypass the channel and set the shared cancel flag directly.
    """

    def __init__(
        self,
        commands: Sequence[Command],
        snapshot: Callable[[], frozenset[Keycode]],
        channel: queue.Queue[GenerateSpec],
        state: DispatchState,
        interval: float = POLL_INTERVAL,
    ) -> None:
        self._commands = tuple(commands)
        self._snapshot = snapshot
        self._channel = channel
        self._state = state
        self._interval = interval

        # Debounce memory: the spec sent during the current press episode.
        self._last_dispatched: GenerateSpec | None = None

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        logger.debug("HotkeyPoller configured with %d command(s)", len(self._commands))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start polling in a daemon background thread."""
        if self._thread is not None:
            logger.warning("Poller already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="alpa-poller", daemon=True,
        )
        self._thread.start()
        logger.info("Hotkey poller started (%d command(s))", len(self._commands))

    def stop(self) -> None:
        """Stop the poller thread, unblocking a pending dispatch."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None
            logger.info("Hotkey poller stopped")

    @property
    def last_dispatched(self) -> GenerateSpec | None:
        return self._last_dispatched

    def tick(self) -> Command | None:
        """Run one polling iteration and return the command acted on, if any."""
        pressed = self._snapshot()

        # Re-arm the debounce once the previous generation is over.
        if not self._state.is_generating.is_set():
            self._last_dispatched = None

        command = select_command(self._commands, pressed)
        if command is None:
            return None

        action = command.action
        if isinstance(action, Cancel):
            if not self._state.cancel_requested.is_set():
                logger.info("Cancel requested")
            self._state.request_cancel()
            return command

        if self._last_dispatched == action:
            return None

        logger.debug("Dispatching %s", action)
        if not self._put(action):
            return None
        self._last_dispatched = action
        return command

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _put(self, spec: GenerateSpec) -> bool:
        """Block until *spec* is in the channel; False if stopped meanwhile."""
        while not self._stop_event.is_set():
            try:
                self._channel.put(spec, timeout=_PUT_RETRY)
                return True
            except queue.Full:
                continue
        return False

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Error in poller tick")
            self._stop_event.wait(self._interval)
