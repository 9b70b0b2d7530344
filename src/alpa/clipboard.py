"""Clipboard operations used to resolve clipboard prompts."""

from __future__ import annotations

import logging
import sys
import time

import pyperclip

from alpa.exceptions import ClipboardError, UnsupportedPlatform
from alpa.keycode import LEFT, LMETA, LSHIFT, RIGHT, C
from alpa.translator import Injector

logger = logging.getLogger(__name__)


def read_text() -> str:
    """Return the current clipboard text.

    Raises:
        ClipboardError: If the clipboard cannot be accessed.
    """
    try:
        return pyperclip.paste()
    except pyperclip.PyperclipException as exc:
        raise ClipboardError(f"Could not read clipboard: {exc}") from exc


def select_current_line(injector: Injector, platform: str | None = None) -> None:
    """Select the line left of the caret, copy it, then deselect.

    Only defined on macOS (Cmd+Shift+Left, Cmd+C, Right).

    Raises:
        UnsupportedPlatform: On any other platform.
    """
    platform = platform or sys.platform
    if platform != "darwin":
        raise UnsupportedPlatform(
            f"Selecting the current line is not supported on {platform}"
        )

    logger.debug("Selecting current line")
    injector.inject_key(LEFT, modifiers=(LMETA, LSHIFT))
    injector.inject_key(C, modifiers=(LMETA,))
    # Give the target app time to publish the copy before we read it.
    time.sleep(0.1)
    injector.inject_key(RIGHT)


class ClipboardReader:
    """Resolves clipboard prompts, optionally selecting the current line first."""

    def __init__(self, injector: Injector, platform: str | None = None) -> None:
        self._injector = injector
        self._platform = platform

    def read(self, select_line: bool = False) -> str:
        if select_line:
            select_current_line(self._injector, self._platform)
        return read_text()
