from __future__ import annotations

import pytest

from alpa.exceptions import ConfigurationError
from alpa.keycode import Keycode, parse_keys


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("LControl", "LControl"),
        ("lcontrol", "LControl"),
        ("ESCAPE", "Escape"),
        ("a", "A"),
        ("7", "Key7"),
        ("f12", "F12"),
        ("ctrl", "LControl"),
        ("esc", "Escape"),
    ],
)
def test_parse(text: str, expected: str) -> None:
    assert Keycode.parse(text) == Keycode(expected)


def test_unknown_key_is_a_config_error() -> None:
    with pytest.raises(ConfigurationError):
        Keycode.parse("Hyper")
    with pytest.raises(ConfigurationError):
        Keycode("lcontrol")


def test_keycodes_compare_by_value() -> None:
    assert Keycode("A") == Keycode.parse("a")
    assert len({Keycode("A"), Keycode.parse("a")}) == 1
    assert Keycode("LShift").is_modifier
    assert not Keycode("Enter").is_modifier


def test_parse_keys_deduplicates() -> None:
    assert parse_keys(["ctrl", "LControl", "x"]) == frozenset({Keycode("LControl"), Keycode("X")})
