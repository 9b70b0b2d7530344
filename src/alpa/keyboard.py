"""pynput-backed keyboard-state reader and keystroke injector."""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from pynput import keyboard

from alpa.keycode import Keycode

logger = logging.getLogger(__name__)

# pynput Key attribute -> canonical key name.  Some attributes (e.g. insert)
# do not exist on every backend, so they are looked up by name.
_SPECIAL_KEY_NAMES: dict[str, str] = {
    "ctrl": "LControl",
    "ctrl_l": "LControl",
    "ctrl_r": "RControl",
    "shift": "LShift",
    "shift_l": "LShift",
    "shift_r": "RShift",
    "alt": "LAlt",
    "alt_l": "LAlt",
    "alt_r": "RAlt",
    "alt_gr": "RAlt",
    "cmd": "LMeta",
    "cmd_l": "LMeta",
    "cmd_r": "RMeta",
    "esc": "Escape",
    "space": "Space",
    "enter": "Enter",
    "backspace": "Backspace",
    "tab": "Tab",
    "caps_lock": "CapsLock",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "home": "Home",
    "end": "End",
    "page_up": "PageUp",
    "page_down": "PageDown",
    "insert": "Insert",
    "delete": "Delete",
    "f1": "F1",
    "f2": "F2",
    "f3": "F3",
    "f4": "F4",
    "f5": "F5",
    "f6": "F6",
    "f7": "F7",
    "f8": "F8",
    "f9": "F9",
    "f10": "F10",
    "f11": "F11",
    "f12": "F12",
}

_SPECIAL_KEYS: dict[keyboard.Key, str] = {
    getattr(keyboard.Key, _attr): _name
    for _attr, _name in _SPECIAL_KEY_NAMES.items()
    if hasattr(keyboard.Key, _attr)
}

# Reverse lookup for injection: canonical name -> pynput key (first wins)
_KEY_BY_NAME: dict[str, keyboard.Key] = {}
for _attr, _name in _SPECIAL_KEY_NAMES.items():
    if _attr in ("ctrl", "shift", "alt", "cmd") or not hasattr(keyboard.Key, _attr):
        continue  # generic aliases; inject the left-hand variant instead
    _KEY_BY_NAME.setdefault(_name, getattr(keyboard.Key, _attr))

# Punctuation characters (unshifted and shifted) -> canonical key names
_PUNCTUATION: dict[str, str] = {
    "`": "Grave", "~": "Grave",
    "-": "Minus", "_": "Minus",
    "=": "Equal", "+": "Equal",
    "[": "LeftBracket", "{": "LeftBracket",
    "]": "RightBracket", "}": "RightBracket",
    "\\": "BackSlash", "|": "BackSlash",
    ";": "Semicolon", ":": "Semicolon",
    "'": "Apostrophe", '"': "Apostrophe",
    ",": "Comma", "<": "Comma",
    ".": "Dot", ">": "Dot",
    "/": "Slash", "?": "Slash",
}

# Shifted digit row (US layout)
_SHIFTED_DIGITS = ")!@#$%^&*("

# Character produced by each punctuation key without Shift
_UNSHIFTED_CHAR: dict[str, str] = {}
for _char, _name in _PUNCTUATION.items():
    _UNSHIFTED_CHAR.setdefault(_name, _char)


def to_keycode(key: keyboard.Key | keyboard.KeyCode | None) -> Keycode | None:
    """Translate a pynput key event into a :class:`Keycode`.

    Characters are normalized so that the same physical key maps to the same
    Keycode whatever modifiers are held (``"a"``, ``"A"`` and Ctrl+A's
    ``"\\x01"`` all become ``A``).  Returns None for keys with no mapping.
    """
    if key is None:
        return None
    if isinstance(key, keyboard.Key):
        name = _SPECIAL_KEYS.get(key)
        return Keycode(name) if name else None

    char = key.char
    if not char or len(char) != 1:
        return None
    if char.isascii() and char.isalpha():
        return Keycode(char.upper())
    if char.isascii() and char.isdigit():
        return Keycode(f"Key{char}")
    if 1 <= ord(char) <= 26:
        # Control character produced while Ctrl is held
        return Keycode(chr(ord(char) + 64))
    if char == "\x1b":
        return Keycode("Escape")
    if char in _SHIFTED_DIGITS:
        return Keycode(f"Key{_SHIFTED_DIGITS.index(char)}")
    name = _PUNCTUATION.get(char)
    return Keycode(name) if name else None


def to_pynput(key: Keycode) -> keyboard.Key | keyboard.KeyCode:
    """Translate a :class:`Keycode` into something pynput can press."""
    special = _KEY_BY_NAME.get(key.name)
    if special is not None:
        return special
    if len(key.name) == 1:
        return keyboard.KeyCode.from_char(key.name.lower())
    if key.name.startswith("Key") and key.name[3:].isdigit():
        return keyboard.KeyCode.from_char(key.name[3:])
    char = _UNSHIFTED_CHAR.get(key.name)
    if char is None:
        raise ValueError(f"No pynput mapping for {key}")
    return keyboard.KeyCode.from_char(char)


class KeyboardState:
    """Tracks currently held keys from global pynput key events.

    :meth:`snapshot` returns an immutable copy of the held set and is safe to
    call from any thread.
    """

    def __init__(self) -> None:
        self._held: set[Keycode] = set()
        self._lock = threading.Lock()
        self._listener: keyboard.Listener | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start listening for key events in a daemon background thread."""
        if self._listener is not None:
            logger.warning("Keyboard listener already running")
            return

        self._listener = keyboard.Listener(
            on_press=self._on_key_press,
            on_release=self._on_key_release,
        )
        self._listener.daemon = True
        self._listener.start()
        logger.info("Keyboard listener started")

    def stop(self) -> None:
        """Stop the listener and forget held keys."""
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            logger.info("Keyboard listener stopped")
        with self._lock:
            self._held.clear()

    def snapshot(self) -> frozenset[Keycode]:
        with self._lock:
            return frozenset(self._held)

    # ------------------------------------------------------------------
    # Internal key handlers
    # ------------------------------------------------------------------

    def _on_key_press(self, key: keyboard.Key | keyboard.KeyCode | None) -> None:
        code = to_keycode(key)
        if code is None:
            return
        with self._lock:
            self._held.add(code)

    def _on_key_release(self, key: keyboard.Key | keyboard.KeyCode | None) -> None:
        code = to_keycode(key)
        if code is None:
            return
        with self._lock:
            self._held.discard(code)


class KeystrokeInjector:
    """Types text and key combos into the focused application."""

    def __init__(self) -> None:
        self._keyboard = keyboard.Controller()
        # Key sequences must not interleave.
        self._lock = threading.Lock()

    def inject_text(self, text: str) -> None:
        """Type *text* literally."""
        with self._lock:
            self._keyboard.type(text)

    def inject_key(self, key: Keycode, modifiers: Iterable[Keycode] = ()) -> None:
        """Tap *key* while holding *modifiers* (pressed in order, released in reverse)."""
        mods = [to_pynput(mod) for mod in modifiers]
        target = to_pynput(key)
        with self._lock:
            for mod in mods:
                self._keyboard.press(mod)
            try:
                self._keyboard.press(target)
                self._keyboard.release(target)
            finally:
                for mod in reversed(mods):
                    self._keyboard.release(mod)
