"""Main entry point: wires the poller, coordinator and adapters together."""

from __future__ import annotations

import logging
import queue
import sys
import threading

from alpa.clipboard import ClipboardReader
from alpa.command import Command, GenerateSpec
from alpa.config import AppConfig, build_commands, get_config_path, load_config
from alpa.coordinator import GenerationCoordinator
from alpa.engine import CompletionEngine
from alpa.exceptions import ConfigurationError
from alpa.keyboard import KeyboardState, KeystrokeInjector
from alpa.poller import HotkeyPoller
from alpa.prompt import SingleLinePrompt
from alpa.state import DispatchState

logger = logging.getLogger(__name__)


class AlpaApp:
    """Main application orchestrator.

    Owns the keyboard listener, the hotkey poller thread and the generation
    thread, connected by a single-slot channel and a shared
    :class:`DispatchState`.
    """

    def __init__(self, config: AppConfig, commands: list[Command]) -> None:
        self._config = config
        self._commands = commands
        self._shutdown = threading.Event()

        self._state = DispatchState()
        # Capacity 1: a second request blocks the poller until this one is taken.
        self._channel: queue.Queue[GenerateSpec] = queue.Queue(maxsize=1)

        logger.info("Initialising keyboard...")
        self._keyboard = KeyboardState()
        self._injector = KeystrokeInjector()

        logger.info("Initialising engine client (%s)...", config.engine.base_url)
        self._engine = CompletionEngine(
            base_url=config.engine.base_url,
            api_key=config.engine.api_key,
            model=config.engine.model,
            temperature=config.engine.temperature,
            max_tokens=config.engine.max_tokens,
            stop=config.engine.stop,
        )

        self._prompt = SingleLinePrompt(config.window, config.style)
        self._coordinator = GenerationCoordinator(
            channel=self._channel,
            state=self._state,
            engine=self._engine,
            injector=self._injector,
            ask_single_line=self._prompt.ask,
            clipboard=ClipboardReader(self._injector),
        )
        self._poller = HotkeyPoller(
            commands=commands,
            snapshot=self._keyboard.snapshot,
            channel=self._channel,
            state=self._state,
        )

    def run(self) -> None:
        """Start all threads and block until interrupted."""
        self._keyboard.start()
        self._coordinator.start()
        self._poller.start()
        for command in self._commands:
            logger.info(
                "  %s -> %s",
                "+".join(sorted(str(k) for k in command.keys)),
                command.action,
            )
        logger.info("alpa is ready.")

        try:
            while not self._shutdown.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self._shutdown.set()
        self._poller.stop()
        self._coordinator.stop()
        self._keyboard.stop()
        self._engine.close()


# ======================================================================
# Entry point
# ======================================================================


def main() -> None:
    """Entry point for the alpa application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    logger.info("Loading configuration from %s...", get_config_path())
    try:
        config = load_config()
        commands = build_commands(config)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    if not commands:
        logger.warning("No commands configured, nothing to listen for")

    app = AlpaApp(config, commands)
    app.run()


if __name__ == "__main__":
    main()
