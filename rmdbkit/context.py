"""Per-statement execution context holding the output buffer sent to a client."""

from __future__ import annotations

from typing import Any

from .defs import BUFFER_LENGTH


class Context:
    """Carries the managers and transaction of a statement plus its reply buffer."""

    def __init__(
        self,
        lock_mgr: Any = None,
        log_mgr: Any = None,
        txn: Any = None,
        capacity: int = BUFFER_LENGTH,
    ) -> None:
        self.lock_mgr = lock_mgr
        self.log_mgr = log_mgr
        self.txn = txn
        self.capacity = capacity
        self.ellipsis = False
        self._buffer = bytearray()

    @property
    def offset(self) -> int:
        """Number of bytes written so far."""
        return len(self._buffer)

    def fits(self, text: str, reserve: int = 0) -> bool:
        """True if ``text`` plus ``reserve`` spare bytes still fits below capacity."""
        return self.offset + reserve + len(text.encode()) < self.capacity

    def append(self, text: str) -> None:
        self._buffer += text.encode()

    def output(self) -> str:
        return self._buffer.decode()