from __future__ import annotations

import pyperclip
import pytest

from alpa import clipboard
from alpa.exceptions import ClipboardError, UnsupportedPlatform


def test_line_select_sequence_on_macos(injector, monkeypatch) -> None:
    monkeypatch.setattr(clipboard.time, "sleep", lambda _: None)

    clipboard.select_current_line(injector, platform="darwin")

    assert injector.events == [
        ("key", "Left", ("LMeta", "LShift")),
        ("key", "C", ("LMeta",)),
        ("key", "Right", ()),
    ]


@pytest.mark.parametrize("platform", ["linux", "win32"])
def test_line_select_unsupported_elsewhere(injector, platform) -> None:
    with pytest.raises(UnsupportedPlatform):
        clipboard.select_current_line(injector, platform=platform)

    assert injector.events == []


def test_reader_reads_clipboard_text(injector, monkeypatch) -> None:
    monkeypatch.setattr(clipboard.pyperclip, "paste", lambda: "copied text")
    monkeypatch.setattr(clipboard.time, "sleep", lambda _: None)

    reader = clipboard.ClipboardReader(injector, platform="darwin")

    assert reader.read() == "copied text"
    assert injector.events == []
    assert reader.read(select_line=True) == "copied text"
    assert len(injector.events) == 3


def test_clipboard_failure_is_a_clipboard_error(monkeypatch) -> None:
    def paste() -> str:
        raise pyperclip.PyperclipException("no clipboard mechanism")

    monkeypatch.setattr(clipboard.pyperclip, "paste", paste)

    with pytest.raises(ClipboardError):
        clipboard.read_text()
