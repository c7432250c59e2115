"""Test doubles shared across the suite."""

from __future__ import annotations

import asyncio

from faculty_routine.data.store import InMemoryDocumentStore, StoreError


class ControlledStore(InMemoryDocumentStore):
    """
    In-memory store whose calls can be held or failed.

    fail_ops / fail_paths make matching calls raise StoreError; gates maps
    (op, path) to an asyncio.Event the call waits on before returning.
    """

    def __init__(self, latency: float = 0.0):
        super().__init__(latency=latency)
        self.fail_ops: set[str] = set()
        self.fail_paths: set[str] = set()
        self.gates: dict[tuple[str, str], asyncio.Event] = {}

    async def _before_call(self, op: str, path: str) -> None:
        await super()._before_call(op, path)
        gate = self.gates.get((op, path))
        if gate is not None:
            await gate.wait()
        if op in self.fail_ops or path in self.fail_paths:
            raise StoreError(f"permission denied: {op} {path}", path)


async def wait_until(predicate, attempts: int = 200) -> None:
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
