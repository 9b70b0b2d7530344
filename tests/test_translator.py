from __future__ import annotations

import threading

from alpa.command import NewlineBehavior
from alpa.engine import Feedback
from alpa.translator import TokenTranslator


def _run(translator: TokenTranslator, tokens: list[str]) -> list[Feedback]:
    results = []
    for token in tokens:
        feedback = translator(token)
        results.append(feedback)
        if feedback is Feedback.HALT:
            break
    return results


def test_enter_at_embedded_newline_only(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["Hello", " world\n", "second line"])

    assert injector.events == [
        ("text", "Hello"),
        ("text", " world"),
        ("key", "Enter", ()),
        ("text", "second line"),
    ]


def test_stop_halts_at_first_newline(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.STOP, threading.Event())

    results = _run(translator, ["abc\n", "def"])

    assert injector.events == [("text", "abc")]
    assert results[-1] is Feedback.HALT
    assert translator.stopped
    assert not translator.cancelled
    # Once stopped, later chunks are refused.
    assert translator("more") is Feedback.HALT
    assert injector.events == [("text", "abc")]


def test_shift_enter_wraps_enter_in_shift(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.SHIFT_ENTER, threading.Event())

    _run(translator, ["one\ntwo"])

    assert injector.events == [
        ("text", "one"),
        ("key", "Enter", ("LShift",)),
        ("text", "two"),
    ]


def test_blank_line_applies_newline_twice(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["a\n", "\n", "b"])

    assert injector.events == [
        ("text", "a"),
        ("key", "Enter", ()),
        ("key", "Enter", ()),
        ("text", "b"),
    ]


def test_trailing_newline_at_end_emits_nothing(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["done\n"])

    assert injector.events == [("text", "done")]


def test_carriage_return_before_newline_is_dropped(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["x\r\ny"])

    assert injector.events == [("text", "x"), ("key", "Enter", ()), ("text", "y")]


def test_cancel_halts_before_typing(injector) -> None:
    cancel = threading.Event()
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, cancel)

    assert translator("first") is Feedback.CONTINUE
    cancel.set()
    assert translator("second") is Feedback.HALT

    assert injector.events == [("text", "first")]
    assert translator.cancelled


def test_crlf_split_across_chunks_under_stop(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.STOP, threading.Event())

    results = _run(translator, ["abc\r", "\n", "def"])

    assert injector.events == [("text", "abc")]
    assert results[-1] is Feedback.HALT


def test_crlf_split_across_chunks_under_enter(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["x\r", "\ny"])

    assert injector.events == [("text", "x"), ("key", "Enter", ()), ("text", "y")]


def test_lone_carriage_return_is_kept(injector) -> None:
    translator = TokenTranslator(injector, NewlineBehavior.ENTER, threading.Event())

    _run(translator, ["a\r", "b"])

    assert injector.events == [("text", "a"), ("text", "\rb")]
