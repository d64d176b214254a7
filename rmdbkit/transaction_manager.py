"""Begin, commit and abort transactions under two-phase locking."""

from __future__ import annotations

import itertools
import threading
from enum import Enum
from typing import Any, ClassVar

from .context import Context
from .defs import INVALID_TXN_ID
from .errors import InternalError
from .lock_manager import LockManager
from .transaction import Transaction, TransactionState, WType


class ConcurrencyMode(Enum):
    TWO_PHASE_LOCKING = 0
    BASIC_TO = 1


class TransactionManager:
    """Hands out transactions and finishes them.

    Rollback uses the record file handles in ``sm_manager.fhs``; each handle
    must offer ``delete_record(rid, context)``, ``insert_record(rid, data)`` and
    ``update_record(rid, data, context)``.  A log manager, when given, must
    offer ``flush_log_to_disk()``.
    """

    txn_map: ClassVar[dict[int, Transaction]] = {}

    def __init__(
        self,
        lock_manager: LockManager,
        sm_manager: Any = None,
        concurrency_mode: ConcurrencyMode = ConcurrencyMode.TWO_PHASE_LOCKING,
    ) -> None:
        self.lock_manager = lock_manager
        self.sm_manager = sm_manager
        self.concurrency_mode = concurrency_mode
        self._latch = threading.Lock()
        self._next_txn_id = itertools.count()
        self._next_timestamp = itertools.count()

    def begin(self, txn: Transaction | None, log_manager: Any) -> Transaction:
        """Start ``txn``, or a new transaction if it is None, and register it."""
        with self._latch:
            if txn is None:
                txn = Transaction(next(self._next_txn_id))
            txn.start_ts = next(self._next_timestamp)
            TransactionManager.txn_map[txn.txn_id] = txn
        return txn

    def _release(self, txn: Transaction, log_manager: Any) -> None:
        for lock_id in list(txn.lock_set):
            self.lock_manager.unlock(txn, lock_id)
        txn.lock_set.clear()
        txn.index_latch_page_set.clear()
        txn.index_deleted_page_set.clear()
        if log_manager is not None:
            log_manager.flush_log_to_disk()

    def commit(self, txn: Transaction, log_manager: Any) -> None:
        txn.write_set.clear()
        self._release(txn, log_manager)
        txn.state = TransactionState.COMMITTED

    def abort(self, txn: Transaction, log_manager: Any) -> None:
        """Undo every write of ``txn`` newest first, then release its locks."""
        if txn.write_set and self.sm_manager is None:
            raise InternalError("Cannot roll back without a system manager")
        context = Context(self.lock_manager, log_manager, txn)
        while txn.write_set:
            write = txn.write_set.pop()
            handle = self.sm_manager.fhs[write.tab_name]
            if write.wtype is WType.INSERT_TUPLE:
                handle.delete_record(write.rid, context)
            elif write.wtype is WType.DELETE_TUPLE:
                handle.insert_record(write.rid, write.record)
            else:
                handle.update_record(write.rid, write.record, context)
        self._release(txn, log_manager)
        txn.state = TransactionState.ABORTED

    def get_transaction(self, txn_id: int) -> Transaction | None:
        if txn_id == INVALID_TXN_ID:
            return None
        with self._latch:
            txn = TransactionManager.txn_map.get(txn_id)
        if txn is None:
            raise InternalError(f"Transaction {txn_id} not found")
        if txn.thread_id != threading.get_ident():
            raise InternalError(f"Transaction {txn_id} belongs to another thread")
        return txn