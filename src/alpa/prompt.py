"""Single-line prompt surface: asks for input in a separate popup process.

The popup runs in its own process so that it can take keyboard focus.
"""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from dataclasses import asdict

from alpa.config import StyleConfig, WindowConfig
from alpa.exceptions import PromptSurfaceError

logger = logging.getLogger(__name__)


class SingleLinePrompt:
    """Launches ``python -m alpa.prompt_window`` and returns what the user typed."""

    def __init__(self, window: WindowConfig, style: StyleConfig) -> None:
        self._window = window
        self._style = style

    def payload(self) -> str:
        """Return the JSON request passed to the popup process."""
        return json.dumps(
            {
                "width": self._window.width,
                "height": self._window.height,
                "style": asdict(self._style),
            }
        )

    def ask(self) -> str:
        """Show the popup and block until it closes.

        Returns:
            The entered text, or an empty string if the popup was dismissed.

        Raises:
            PromptSurfaceError: If the process cannot be launched, exits with
                an error, or prints something that is not UTF-8 text.
        """
        cmd = [sys.executable, "-m", "alpa.prompt_window", self.payload()]
        logger.debug("Launching prompt window")
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as exc:
            raise PromptSurfaceError(f"Could not launch prompt window: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error("Prompt window exited with %d: %s", result.returncode, stderr[:500])
            raise PromptSurfaceError(
                f"Prompt window exited with status {result.returncode}"
            )

        try:
            text = result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PromptSurfaceError(f"Prompt window returned invalid text: {exc}") from exc

        return text.rstrip("\r\n")
