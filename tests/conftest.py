from __future__ import annotations

import pytest

from alpa.engine import Feedback
from alpa.state import DispatchState


class FakeInjector:
    """Records injected keystrokes as ("text", ...) / ("key", name, mods) tuples."""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def inject_text(self, text: str) -> None:
        self.events.append(("text", text))

    def inject_key(self, key, modifiers=()) -> None:
        self.events.append(("key", key.name, tuple(m.name for m in modifiers)))


class FakeEngine:
    """Feeds a fixed token list to the callback, honouring HALT."""

    def __init__(self, tokens: list[str], error: Exception | None = None) -> None:
        self.tokens = tokens
        self.error = error
        self.prompts: list[str] = []
        self.delivered: list[str] = []
        self.before_token = None

    def stream_generate(self, prompt, on_token) -> None:
        self.prompts.append(prompt)
        for index, token in enumerate(self.tokens):
            if self.before_token is not None:
                self.before_token(index)
            self.delivered.append(token)
            if on_token(token) is Feedback.HALT:
                return
        if self.error is not None:
            raise self.error


class FakeClipboard:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.calls: list[bool] = []

    def read(self, select_line: bool = False) -> str:
        self.calls.append(select_line)
        return self.text


@pytest.fixture
def injector() -> FakeInjector:
    return FakeInjector()


@pytest.fixture
def state() -> DispatchState:
    return DispatchState()
