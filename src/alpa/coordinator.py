"""Generation coordinator: consumes dispatched specs, one generation at a time."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Protocol

from alpa.command import (
    PROMPT_PLACEHOLDER,
    Autocomplete,
    Clipboard,
    ClipboardLoad,
    GenerateSpec,
    PromptMode,
    SingleLineUi,
)
from alpa.engine import TokenCallback
from alpa.exceptions import GenerationError
from alpa.state import DispatchState
from alpa.translator import Injector, TokenTranslator

logger = logging.getLogger(__name__)

# How often a blocked receive re-checks whether the coordinator was stopped.
_GET_RETRY = 0.5


class Engine(Protocol):
    def stream_generate(self, prompt: str, on_token: TokenCallback) -> None: ...


class ClipboardSource(Protocol):
    def read(self, select_line: bool = False) -> str: ...


def build_prompt(mode: PromptMode, text: str) -> str:
    """Return the text sent to the engine for *mode*.

    Autocomplete passes *text* through; a prompt template gets every literal
    ``{{PROMPT}}`` replaced by *text* and is otherwise untouched.
    """
    if isinstance(mode, Autocomplete):
        return text
    return mode.template.replace(PROMPT_PLACEHOLDER, text)


class GenerationCoordinator:
    """Single consumer of the dispatch channel.

    Runs each received spec to completion before taking the next one, so at
    most one generation is ever in flight.  ``is_generating`` is cleared on
    every exit path, including an empty prompt and every error.

    Parameters
    ----------
    channel:
        The poller's single-slot ``queue.Queue``.
    state:
        Flags shared with the poller.
    engine:
        Streaming generation engine.
    injector:
        Keystroke injection service the token translator types through.
    ask_single_line:
        Blocking call returning the popup's text ("" if dismissed).
    clipboard:
        Clipboard source, optionally selecting the current line first.
    """

    def __init__(
        self,
        channel: queue.Queue[GenerateSpec],
        state: DispatchState,
        engine: Engine,
        injector: Injector,
        ask_single_line: Callable[[], str],
        clipboard: ClipboardSource,
    ) -> None:
        self._channel = channel
        self._state = state
        self._engine = engine
        self._injector = injector
        self._ask_single_line = ask_single_line
        self._clipboard = clipboard

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run the consumer loop in a daemon background thread."""
        if self._thread is not None:
            logger.warning("Coordinator already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, name="alpa-generation", daemon=True,
        )
        self._thread.start()
        logger.info("Generation coordinator started")

    def stop(self) -> None:
        """Stop taking new specs and ask a running generation to halt."""
        self._stop_event.set()
        self._state.request_cancel()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
            logger.info("Generation coordinator stopped")

    def run(self) -> None:
        """Receive and process specs until stopped."""
        while not self._stop_event.is_set():
            try:
                spec = self._channel.get(timeout=_GET_RETRY)
            except queue.Empty:
                continue
            self.process(spec)

    def process(self, spec: GenerateSpec) -> None:
        """Run one generation for *spec*; never raises."""
        state = self._state
        state.is_generating.set()
        # A cancel pressed while idle must not kill this generation.
        state.cancel_requested.clear()
        try:
            self._generate(spec)
        except GenerationError as exc:
            logger.error("Generation aborted: %s", exc)
        except Exception:
            logger.exception("Generation error")
        finally:
            state.is_generating.clear()
            state.cancel_requested.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _generate(self, spec: GenerateSpec) -> None:
        text = self._resolve_prompt(spec)
        if not text:
            logger.info("Empty prompt, nothing to generate")
            return

        if self._state.cancel_requested.is_set():
            logger.info("Generation cancelled before start")
            return

        prompt = build_prompt(spec.mode, text)
        translator = TokenTranslator(
            self._injector, spec.newline, self._state.cancel_requested,
        )
        logger.info("Generating (%s, newline=%s)", type(spec.mode).__name__, spec.newline.value)
        self._engine.stream_generate(prompt, translator)

        if translator.cancelled:
            logger.info("Generation cancelled")
        elif translator.stopped:
            logger.info("Generation stopped at newline")
        else:
            logger.info("Generation finished")

    def _resolve_prompt(self, spec: GenerateSpec) -> str:
        method = spec.input
        if isinstance(method, SingleLineUi):
            return self._ask_single_line()
        if isinstance(method, Clipboard):
            return self._clipboard.read(select_line=method.load is ClipboardLoad.LINE)
        raise TypeError(f"Unknown input method {method!r}")
