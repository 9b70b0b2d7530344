"""Command model: what a key chord does when it is held."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Union

from alpa.keycode import Keycode


class ClipboardLoad(enum.Enum):
    """How to populate the clipboard before reading it."""

    LINE = "line"


@dataclass(frozen=True)
class SingleLineUi:
    """Ask the user for a prompt in the popup input."""


@dataclass(frozen=True)
class Clipboard:
    """Use the clipboard text as the prompt, optionally selecting a line first."""

    load: ClipboardLoad | None = None


InputMethod = Union[SingleLineUi, Clipboard]


@dataclass(frozen=True)
class Autocomplete:
    """Send the resolved text to the engine as-is."""


PROMPT_PLACEHOLDER = "{{PROMPT}}"


@dataclass(frozen=True)
class Prompt:
    """Wrap the resolved text in *template* at every ``{{PROMPT}}``."""

    template: str


PromptMode = Union[Autocomplete, Prompt]


class NewlineBehavior(enum.Enum):
    STOP = "stop"
    ENTER = "enter"
    SHIFT_ENTER = "shift-enter"


@dataclass(frozen=True)
class GenerateSpec:
    input: InputMethod
    mode: PromptMode
    newline: NewlineBehavior = NewlineBehavior.ENTER


class Cancel(enum.Enum):
    """Action that stops the generation in flight."""

    CANCEL = "cancel"


CANCEL = Cancel.CANCEL

Action = Union[GenerateSpec, Cancel]


@dataclass(frozen=True)
class Command:
    """A key chord bound to an action."""

    keys: frozenset[Keycode]
    action: Action

    def __post_init__(self) -> None:
        # Accept any iterable of keys but store an immutable set.
        if not isinstance(self.keys, frozenset):
            object.__setattr__(self, "keys", frozenset(self.keys))
        if not self.keys:
            raise ValueError("A command needs at least one key")

    @property
    def specificity(self) -> int:
        return len(self.keys)


def is_pressed(command: Command, pressed: frozenset[Keycode] | set[Keycode]) -> bool:
    """Return True if every key of *command* is held in *pressed*.

    Extra keys in *pressed* never disqualify a match.
    """
    return command.keys <= pressed


def select_command(
    commands: Iterable[Command], pressed: frozenset[Keycode] | set[Keycode]
) -> Command | None:
    """Return the most specific command matched by *pressed*, or None.

    Candidates are ordered by descending key count.  ``sorted`` is stable, so
    among equally specific matches the earliest configured command wins.
    """
    candidates = [cmd for cmd in commands if is_pressed(cmd, pressed)]
    if not candidates:
        return None
    return sorted(candidates, key=lambda cmd: -cmd.specificity)[0]
