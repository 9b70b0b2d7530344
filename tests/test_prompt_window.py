from __future__ import annotations

import pytest

# The module imports tkinter; creating a window is never needed here.
pytest.importorskip("tkinter", exc_type=ImportError)

from alpa.prompt_window import EscapeGate, PromptWindow  # noqa: E402


class FakeRoot:
    def __init__(self) -> None:
        self.destroyed = 0
        self.scheduled = []

    def destroy(self) -> None:
        self.destroyed += 1

    def after(self, ms, callback) -> None:
        self.scheduled.append(callback)


class FakeEntry:
    def __init__(self, text: str) -> None:
        self._text = text

    def get(self) -> str:
        return self._text


def _window(text: str = "") -> tuple[PromptWindow, FakeRoot]:
    window = PromptWindow.__new__(PromptWindow)
    root = FakeRoot()
    window._root = root
    window._entry = FakeEntry(text)
    window._result = ""
    window._closed = False
    window._escape = EscapeGate()
    return window, root


def test_escape_dismisses_after_press_and_release() -> None:
    gate = EscapeGate()

    gate.press()
    gate.release()

    assert gate.should_dismiss()


def test_release_without_press_is_ignored() -> None:
    gate = EscapeGate()

    gate.release()

    assert not gate.should_dismiss()


def test_auto_repeat_pairs_do_not_dismiss_while_held() -> None:
    gate = EscapeGate()

    # Held Escape on X11: repeated release/press pairs, no real release yet.
    gate.press()
    gate.release()
    gate.press()
    gate.release()
    gate.press()

    assert not gate.should_dismiss()
    gate.release()
    assert gate.should_dismiss()


def test_held_escape_from_opening_chord_does_not_close() -> None:
    window, root = _window()

    window._on_escape_release()
    window._on_escape_press()
    window._on_escape_release()
    window._on_escape_press()
    for callback in root.scheduled:
        callback()

    assert root.destroyed == 0


def test_focus_out_after_enter_keeps_the_text() -> None:
    window, root = _window("write a haiku")

    window._on_enter()
    window._on_focus_out()

    assert window._result == "write a haiku"
    assert root.destroyed == 1


def test_escape_then_focus_out_destroys_once() -> None:
    window, root = _window("ignored")

    window._on_escape_press()
    window._on_escape_release()
    for callback in root.scheduled:
        callback()
    window._on_focus_out()

    assert window._result == ""
    assert root.destroyed == 1
