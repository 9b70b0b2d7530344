"""Token-to-keystroke translation for one generation."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Protocol

from alpa.command import NewlineBehavior
from alpa.engine import Feedback
from alpa.keycode import ENTER, LSHIFT, Keycode

logger = logging.getLogger(__name__)


class Injector(Protocol):
    """Keystroke injection service."""

    def inject_text(self, text: str) -> None: ...

    def inject_key(self, key: Keycode, modifiers: Iterable[Keycode] = ()) -> None: ...


class TokenTranslator:
    """Per-token callback that types streamed text into the focused window.

    Text before the first newline of a chunk continues the current line.
    Every newline is a line boundary whose action (``newline``) is applied
    just before the next non-empty line is typed, so a trailing newline at
    the end of the stream emits nothing.  A blank line applies the action
    once more.

    A fresh translator is created for every generation.
    """

    def __init__(
        self,
        injector: Injector,
        newline: NewlineBehavior,
        cancel_requested: threading.Event,
    ) -> None:
        self._injector = injector
        self._newline = newline
        self._cancel_requested = cancel_requested

        self._pending_newlines = 0
        # A "\r" ending the previous chunk, held back until we see what follows.
        self._pending_cr = False
        self.cancelled = False
        self.stopped = False

    def __call__(self, text: str) -> Feedback:
        if self._cancel_requested.is_set():
            logger.info("Generation cancelled")
            self.cancelled = True
            return Feedback.HALT
        if self.stopped:
            return Feedback.HALT

        if self._pending_cr:
            self._pending_cr = False
            if not text.startswith("\n"):
                text = "\r" + text
        if text.endswith("\r"):
            self._pending_cr = True
            text = text[:-1]

        parts = text.split("\n")
        for index, part in enumerate(parts):
            if index > 0:
                self._pending_newlines += 1
            if part.endswith("\r") and index < len(parts) - 1:
                part = part[:-1]
            if not part:
                continue
            if not self._flush_newlines():
                return Feedback.HALT
            self._injector.inject_text(part)

        return Feedback.CONTINUE

    def _flush_newlines(self) -> bool:
        """Apply pending line boundaries; False if the policy halted."""
        while self._pending_newlines:
            self._pending_newlines -= 1
            if self._newline is NewlineBehavior.STOP:
                logger.debug("Newline reached, stopping generation")
                self.stopped = True
                return False
            if self._newline is NewlineBehavior.ENTER:
                self._injector.inject_key(ENTER)
            else:
                self._injector.inject_key(ENTER, modifiers=(LSHIFT,))
        return True
