"""Borderless single-line input popup, run as ``python -m alpa.prompt_window``.

Takes one JSON argument ``{"width": ..., "height": ..., "style": {...}}``,
opens at the mouse pointer, and prints the entered text to stdout when the
user presses Enter.  Escape or losing focus closes it without output.
"""

from __future__ import annotations

import json
import sys
import tkinter as tk

_DEFAULT_FONT = ("Segoe UI", 12)
_DEFAULT_BG = "#2a2a2a"
_DEFAULT_INPUT_BG = "#1e1e1e"
_DEFAULT_TEXT = "#e0e0e0"
_DEFAULT_STROKE = "#555555"
_DEFAULT_SELECTED_BG = "#4a4a8a"


def _font(spec: str) -> tuple | str:
    """Parse ``"Family 12"`` into a tk font tuple; empty means default."""
    if not spec:
        return _DEFAULT_FONT
    family, _, size = spec.rpartition(" ")
    if family and size.isdigit():
        return (family, int(size))
    return spec


class EscapeGate:
    """Decides when an Escape key should dismiss the popup.

    Only an Escape that is pressed while the popup is open counts, and it
    dismisses on release.  An Escape still held from the chord that opened
    the popup reaches us as auto-repeat: repeated presses, or press/release
    pairs on X11.  Each press cancels a release seen before it, so the popup
    closes only once the key is really let go.
    """

    def __init__(self) -> None:
        self._armed = False
        self._released = False

    def press(self) -> None:
        self._armed = True
        self._released = False

    def release(self) -> None:
        if self._armed:
            self._released = True

    def should_dismiss(self) -> bool:
        return self._released


# Longer than the gap between an auto-repeat release and its paired press.
_ESCAPE_SETTLE_MS = 50


class PromptWindow:
    """The popup.  :meth:`run` blocks until it closes and returns the text."""

    def __init__(self, width: int, height: int, style: dict) -> None:
        self._width = width
        self._height = height
        self._style = style
        self._result = ""
        self._closed = False
        self._escape = EscapeGate()

        self._root = tk.Tk()
        self._root.withdraw()
        self._root.overrideredirect(True)
        self._root.attributes("-topmost", True)
        self._entry = self._build()

    def _color(self, key: str, default: str) -> str:
        return self._style.get(key) or default

    def _build(self) -> tk.Entry:
        root = self._root
        border = tk.Frame(
            root, bg=self._color("stroke_color", _DEFAULT_STROKE), padx=1, pady=1,
        )
        border.pack(fill="both", expand=True)

        inner = tk.Frame(border, bg=self._color("bg_color", _DEFAULT_BG))
        inner.pack(fill="both", expand=True)

        text_color = self._color("text_color", _DEFAULT_TEXT)
        entry = tk.Entry(
            inner,
            font=_font(self._style.get("font", "")),
            bg=self._color("input_bg_color", _DEFAULT_INPUT_BG),
            fg=text_color,
            insertbackground=text_color,
            selectbackground=self._color("selected_bg_color", _DEFAULT_SELECTED_BG),
            relief="flat",
        )
        entry.pack(fill="both", expand=True, padx=4, pady=4)

        entry.bind("<Return>", self._on_enter)
        entry.bind("<KeyPress-Escape>", self._on_escape_press)
        entry.bind("<KeyRelease-Escape>", self._on_escape_release)
        entry.bind("<FocusOut>", self._on_focus_out)
        return entry

    def _close(self, result: str) -> None:
        """Record *result* and destroy the window; later calls are ignored."""
        if self._closed:
            return
        self._closed = True
        self._result = result
        self._root.destroy()

    def _on_enter(self, event: object = None) -> str:
        if not self._closed:
            self._close(self._entry.get())
        return "break"

    def _on_escape_press(self, event: object = None) -> str:
        self._escape.press()
        return "break"

    def _on_escape_release(self, event: object = None) -> str:
        self._escape.release()
        if self._escape.should_dismiss():
            self._root.after(_ESCAPE_SETTLE_MS, self._dismiss_if_released)
        return "break"

    def _dismiss_if_released(self) -> None:
        if self._escape.should_dismiss():
            self._close("")

    def _on_focus_out(self, event: object = None) -> None:
        # Also fires while destroy() tears the window down.
        self._close("")

    def run(self) -> str:
        root = self._root
        x, y = root.winfo_pointerxy()
        # Keep the popup on screen.
        x = min(x, root.winfo_screenwidth() - self._width)
        y = min(y, root.winfo_screenheight() - self._height)
        root.geometry(f"{self._width}x{self._height}+{max(x, 0)}+{max(y, 0)}")
        root.deiconify()
        root.lift()
        root.focus_force()
        self._entry.focus_force()
        # Retry focus after a brief delay (some WMs need time).
        root.after(100, lambda: self._entry.focus_force())
        root.mainloop()
        return self._result


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: python -m alpa.prompt_window '<json>'", file=sys.stderr)
        return 2
    try:
        request = json.loads(args[0])
        width = int(request["width"])
        height = int(request["height"])
        style = dict(request.get("style") or {})
    except (ValueError, KeyError, TypeError) as exc:
        print(f"invalid request: {exc}", file=sys.stderr)
        return 2

    text = PromptWindow(width, height, style).run()
    if text:
        sys.stdout.buffer.write(text.encode("utf-8"))
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
