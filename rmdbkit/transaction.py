"""Transaction state, write records, lock identifiers and abort exceptions."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from .defs import INVALID_LSN, INVALID_TIMESTAMP, Rid

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


class TransactionState(Enum):
    DEFAULT = 0
    GROWING = 1
    SHRINKING = 2
    COMMITTED = 3
    ABORTED = 4


class IsolationLevel(Enum):
    READ_UNCOMMITTED = 0
    REPEATABLE_READ = 1
    READ_COMMITTED = 2
    SERIALIZABLE = 3


class WType(IntEnum):
    """Kind of write a transaction performed, used to undo it."""

    INSERT_TUPLE = 0
    DELETE_TUPLE = 1
    UPDATE_TUPLE = 2


@dataclass
class WriteRecord:
    """One write of a transaction.

    Inserts only need the rid; deletes and updates keep the old record bytes.
    """

    wtype: WType
    tab_name: str
    rid: Rid
    record: bytes | None = None


class LockDataType(IntEnum):
    TABLE = 0
    RECORD = 1


_NO_RID = Rid(-1, -1)


@dataclass(frozen=True)
class LockDataId:
    """Identifies a lockable object: a whole table or one record of it."""

    fd: int
    type: LockDataType
    rid: Rid = _NO_RID

    def __post_init__(self) -> None:
        if self.type is LockDataType.TABLE and self.rid != _NO_RID:
            raise ValueError("a table lock does not name a record")

    @classmethod
    def table(cls, fd: int) -> LockDataId:
        return cls(fd, LockDataType.TABLE)

    @classmethod
    def record(cls, fd: int, rid: Rid) -> LockDataId:
        return cls(fd, LockDataType.RECORD, rid)

    def key(self) -> int:
        """Pack the identifier into a signed 64-bit integer."""
        if self.type is LockDataType.TABLE:
            return self.fd
        packed = (
            (int(self.type) << 63)
            | (self.fd << 31)
            | (self.rid.page_no << 16)
            | self.rid.slot_no
        ) & _INT64_MASK
        return packed - (1 << 64) if packed & _INT64_SIGN else packed


class AbortReason(IntEnum):
    LOCK_ON_SHIRINKING = 0
    UPGRADE_CONFLICT = 1
    DEADLOCK_PREVENTION = 2


class TransactionAbortException(Exception):
    """Raised when a transaction must be rolled back."""

    def __init__(self, txn_id: int, abort_reason: AbortReason) -> None:
        self.txn_id = txn_id
        self.abort_reason = abort_reason
        super().__init__(self.info())

    def info(self) -> str:
        if self.abort_reason is AbortReason.LOCK_ON_SHIRINKING:
            return (
                f"Transaction {self.txn_id} aborted because it cannot request locks on SHRINKING phase\n"
            )
        if self.abort_reason is AbortReason.UPGRADE_CONFLICT:
            return (
                f"Transaction {self.txn_id} aborted because another transaction is waiting for upgrading\n"
            )
        if self.abort_reason is AbortReason.DEADLOCK_PREVENTION:
            return f"Transaction {self.txn_id} aborted for deadlock prevention\n"
        return "Transaction aborted\n"

    def __str__(self) -> str:
        return self.info()


@dataclass(eq=False)
class Transaction:
    """A transaction: its identity, phase, writes and held locks."""

    txn_id: int
    isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE
    state: TransactionState = TransactionState.DEFAULT
    txn_mode: bool = False
    start_ts: int = INVALID_TIMESTAMP
    prev_lsn: int = INVALID_LSN
    thread_id: int = field(default_factory=threading.get_ident)
    write_set: deque[WriteRecord] = field(default_factory=deque)
    lock_set: set[LockDataId] = field(default_factory=set)
    index_latch_page_set: deque[Any] = field(default_factory=deque)
    index_deleted_page_set: deque[Any] = field(default_factory=deque)

    def append_write_record(self, write_record: WriteRecord) -> None:
        self.write_set.append(write_record)

    def append_index_deleted_page(self, page: Any) -> None:
        self.index_deleted_page_set.append(page)

    def append_index_latch_page(self, page: Any) -> None:
        self.index_latch_page_set.append(page)