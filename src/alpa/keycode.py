"""Platform-independent key identities used in command chords."""

from __future__ import annotations

import string
from dataclasses import dataclass

from alpa.exceptions import ConfigurationError

_MODIFIERS = (
    "LControl", "RControl",
    "LShift", "RShift",
    "LAlt", "RAlt",
    "LMeta", "RMeta",
)

_NAMED = (
    "Escape", "Space", "Enter", "Backspace", "Tab", "CapsLock",
    "Up", "Down", "Left", "Right",
    "Home", "End", "PageUp", "PageDown", "Insert", "Delete",
    "Grave", "Minus", "Equal", "LeftBracket", "RightBracket", "BackSlash",
    "Semicolon", "Apostrophe", "Comma", "Dot", "Slash",
)

_KNOWN: tuple[str, ...] = (
    _MODIFIERS
    + _NAMED
    + tuple(string.ascii_uppercase)
    + tuple(f"Key{d}" for d in string.digits)
    + tuple(f"F{n}" for n in range(1, 13))
)

_KNOWN_SET = frozenset(_KNOWN)

# Case-insensitive lookup: "lcontrol" -> "LControl"
_BY_LOWER: dict[str, str] = {name.lower(): name for name in _KNOWN}

# Convenience aliases accepted in config files
_ALIASES: dict[str, str] = {
    "ctrl": "LControl",
    "control": "LControl",
    "shift": "LShift",
    "alt": "LAlt",
    "meta": "LMeta",
    "cmd": "LMeta",
    "esc": "Escape",
    "return": "Enter",
}


@dataclass(frozen=True, order=True)
class Keycode:
    """A physical key, identified by its canonical name (e.g. ``"LControl"``)."""

    name: str

    def __post_init__(self) -> None:
        if self.name not in _KNOWN_SET:
            raise ConfigurationError(f"Unknown key name {self.name!r}")

    @classmethod
    def parse(cls, text: str) -> Keycode:
        """Parse a key name case-insensitively, accepting a few aliases.

        Single letters and digits are accepted as shorthand (``"a"`` -> ``A``,
        ``"1"`` -> ``Key1``).

        Raises:
            ConfigurationError: If the name is not a known key.
        """
        lowered = text.strip().lower()
        if lowered in _ALIASES:
            return cls(_ALIASES[lowered])
        if len(lowered) == 1 and lowered in string.digits:
            return cls(f"Key{lowered}")
        if lowered in _BY_LOWER:
            return cls(_BY_LOWER[lowered])
        raise ConfigurationError(f"Unknown key name {text!r}")

    @property
    def is_modifier(self) -> bool:
        return self.name in _MODIFIERS

    def __str__(self) -> str:
        return self.name


def parse_keys(names: list[str]) -> frozenset[Keycode]:
    """Parse a list of key names into a chord."""
    return frozenset(Keycode.parse(name) for name in names)


ENTER = Keycode("Enter")
LSHIFT = Keycode("LShift")
LMETA = Keycode("LMeta")
LEFT = Keycode("Left")
RIGHT = Keycode("Right")
C = Keycode("C")
