"""Multi-granularity two-phase lock manager with a no-wait conflict policy."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce

from .defs import Rid
from .transaction import (
    AbortReason,
    LockDataId,
    Transaction,
    TransactionAbortException,
    TransactionState,
)


class LockMode(Enum):
    SHARED = 0
    EXCLUSIVE = 1
    INTENTION_SHARED = 2
    INTENTION_EXCLUSIVE = 3
    S_IX = 4


class GroupLockMode(Enum):
    """Strongest mode held in a lock queue."""

    NON_LOCK = 0
    IS = 1
    IX = 2
    S = 3
    X = 4
    SIX = 5


_S, _X = LockMode.SHARED, LockMode.EXCLUSIVE
_IS, _IX, _SIX = LockMode.INTENTION_SHARED, LockMode.INTENTION_EXCLUSIVE, LockMode.S_IX

_COMPATIBLE = {
    _IS: {_IS, _IX, _S, _SIX},
    _IX: {_IS, _IX},
    _S: {_IS, _S},
    _SIX: {_IS},
    _X: set(),
}

_COVERS = {
    _IS: {_IS},
    _IX: {_IS, _IX},
    _S: {_IS, _S},
    _SIX: {_IS, _IX, _S, _SIX},
    _X: {_IS, _IX, _S, _SIX, _X},
}

_GROUP = {
    _IS: GroupLockMode.IS,
    _IX: GroupLockMode.IX,
    _S: GroupLockMode.S,
    _SIX: GroupLockMode.SIX,
    _X: GroupLockMode.X,
}


def _join(a: LockMode, b: LockMode) -> LockMode:
    if b in _COVERS[a]:
        return a
    if a in _COVERS[b]:
        return b
    return _SIX


@dataclass
class LockRequest:
    txn_id: int
    lock_mode: LockMode
    granted: bool = False


@dataclass
class LockRequestQueue:
    request_queue: list[LockRequest] = field(default_factory=list)
    group_lock_mode: GroupLockMode = GroupLockMode.NON_LOCK

    def refresh_group_mode(self) -> None:
        modes = [req.lock_mode for req in self.request_queue if req.granted]
        self.group_lock_mode = _GROUP[reduce(_join, modes)] if modes else GroupLockMode.NON_LOCK


class LockManager:
    """Grants table and record locks; a conflicting request aborts at once."""

    def __init__(self) -> None:
        self._latch = threading.Lock()
        self.lock_table: dict[LockDataId, LockRequestQueue] = {}

    def _acquire(self, txn: Transaction, lock_id: LockDataId, mode: LockMode) -> bool:
        if txn.state is TransactionState.SHRINKING:
            raise TransactionAbortException(txn.txn_id, AbortReason.LOCK_ON_SHIRINKING)
        if txn.state is TransactionState.DEFAULT:
            txn.state = TransactionState.GROWING
        queue = self.lock_table.setdefault(lock_id, LockRequestQueue())
        own = next((req for req in queue.request_queue if req.txn_id == txn.txn_id), None)
        wanted = mode if own is None else _join(own.lock_mode, mode)
        if own is not None and wanted is own.lock_mode:
            return True
        for other in queue.request_queue:
            if other.txn_id != txn.txn_id and other.granted and other.lock_mode not in _COMPATIBLE[wanted]:
                if not queue.request_queue:
                    del self.lock_table[lock_id]
                raise TransactionAbortException(txn.txn_id, AbortReason.DEADLOCK_PREVENTION)
        if own is None:
            queue.request_queue.append(LockRequest(txn.txn_id, wanted, granted=True))
        else:
            own.lock_mode = wanted
        queue.refresh_group_mode()
        txn.lock_set.add(lock_id)
        return True

    def _lock_record(self, txn: Transaction, rid: Rid, tab_fd: int, table_mode: LockMode, mode: LockMode) -> bool:
        with self._latch:
            self._acquire(txn, LockDataId.table(tab_fd), table_mode)
            return self._acquire(txn, LockDataId.record(tab_fd, rid), mode)

    def _lock_table(self, txn: Transaction, tab_fd: int, mode: LockMode) -> bool:
        with self._latch:
            return self._acquire(txn, LockDataId.table(tab_fd), mode)

    def lock_shared_on_record(self, txn: Transaction, rid: Rid, tab_fd: int) -> bool:
        return self._lock_record(txn, rid, tab_fd, _IS, _S)

    def lock_exclusive_on_record(self, txn: Transaction, rid: Rid, tab_fd: int) -> bool:
        return self._lock_record(txn, rid, tab_fd, _IX, _X)

    def lock_shared_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._lock_table(txn, tab_fd, _S)

    def lock_exclusive_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._lock_table(txn, tab_fd, _X)

    def lock_is_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._lock_table(txn, tab_fd, _IS)

    def lock_ix_on_table(self, txn: Transaction, tab_fd: int) -> bool:
        return self._lock_table(txn, tab_fd, _IX)

    def unlock(self, txn: Transaction, lock_data_id: LockDataId) -> bool:
        """Release one lock; the transaction enters its shrinking phase."""
        with self._latch:
            if txn.state is TransactionState.GROWING:
                txn.state = TransactionState.SHRINKING
            txn.lock_set.discard(lock_data_id)
            queue = self.lock_table.get(lock_data_id)
            if queue is None:
                return False
            remaining = [req for req in queue.request_queue if req.txn_id != txn.txn_id]
            if len(remaining) == len(queue.request_queue):
                return False
            queue.request_queue = remaining
            if remaining:
                queue.refresh_group_mode()
            else:
                del self.lock_table[lock_data_id]
            return True