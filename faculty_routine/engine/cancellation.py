"""Cooperative cancellation for in-flight schedule scans."""

from __future__ import annotations


class CancellationToken:
    """
    Flag shared by reference between a session and the work it started.

    Work polls `cancelled` at its own yield points and stops quietly; nothing
    is interrupted mid-call. Each token carries the generation number of the
    selection it belongs to.
    """

    __slots__ = ("generation", "_cancelled")

    def __init__(self, generation: int = 0):
        self.generation = generation
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"CancellationToken(generation={self.generation}, {state})"
