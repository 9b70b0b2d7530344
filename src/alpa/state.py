"""Flags shared between the hotkey poller and the generation coordinator."""

from __future__ import annotations

import threading


class DispatchState:
    """Process-wide dispatch flags, passed explicitly to both threads.

    Each flag is an independent :class:`threading.Event`; no invariant needs
    both to change together, so there is no lock around the pair.
    """

    def __init__(self) -> None:
        # True strictly while a generation is in flight.
        self.is_generating = threading.Event()
        # Set by the poller on a Cancel chord, consumed by the token callback.
        self.cancel_requested = threading.Event()

    def request_cancel(self) -> None:
        self.cancel_requested.set()

    def __repr__(self) -> str:
        return (
            f"DispatchState(is_generating={self.is_generating.is_set()}, "
            f"cancel_requested={self.cancel_requested.is_set()})"
        )
