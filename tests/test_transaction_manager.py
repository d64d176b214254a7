import threading
from types import SimpleNamespace

import pytest

from rmdbkit.defs import INVALID_TXN_ID, Rid
from rmdbkit.errors import InternalError
from rmdbkit.lock_manager import LockManager
from rmdbkit.transaction import (
    LockDataId,
    Transaction,
    TransactionState,
    WriteRecord,
    WType,
)
from rmdbkit.transaction_manager import ConcurrencyMode, TransactionManager

FD = 3


class FakeFileHandle:
    def __init__(self):
        self.calls = []

    def delete_record(self, rid, context):
        self.calls.append(("delete", rid))

    def insert_record(self, rid, data):
        self.calls.append(("insert", rid, data))

    def update_record(self, rid, data, context):
        self.calls.append(("update", rid, data))


class FakeLog:
    def __init__(self):
        self.flushes = 0

    def flush_log_to_disk(self):
        self.flushes += 1


@pytest.fixture
def handle():
    return FakeFileHandle()


@pytest.fixture
def manager(handle):
    TransactionManager.txn_map.clear()
    sm = SimpleNamespace(fhs={"t": handle})
    return TransactionManager(LockManager(), sm)


def test_begin_assigns_sequential_ids(manager):
    first = manager.begin(None, None)
    second = manager.begin(None, None)
    assert second.txn_id == first.txn_id + 1
    assert second.start_ts > first.start_ts
    assert manager.get_transaction(first.txn_id) is first


def test_begin_registers_existing_transaction(manager):
    txn = Transaction(42)
    assert manager.begin(txn, None) is txn
    assert manager.get_transaction(42) is txn


def test_get_transaction_invalid_and_unknown(manager):
    assert manager.get_transaction(INVALID_TXN_ID) is None
    with pytest.raises(InternalError):
        manager.get_transaction(999)


def test_get_transaction_from_other_thread_fails(manager):
    txn = Transaction(7, thread_id=threading.get_ident() + 1)
    manager.begin(txn, None)
    with pytest.raises(InternalError):
        manager.get_transaction(7)


def test_commit_releases_locks(manager):
    log = FakeLog()
    t1 = manager.begin(None, log)
    manager.lock_manager.lock_exclusive_on_table(t1, FD)
    manager.commit(t1, log)
    assert t1.state is TransactionState.COMMITTED
    assert t1.lock_set == set()
    assert log.flushes == 1
    t2 = manager.begin(None, log)
    assert manager.lock_manager.lock_exclusive_on_table(t2, FD)


def test_abort_undoes_writes_newest_first(manager, handle):
    txn = manager.begin(None, None)
    manager.lock_manager.lock_exclusive_on_record(txn, Rid(1, 0), FD)
    txn.append_write_record(WriteRecord(WType.INSERT_TUPLE, "t", Rid(1, 0)))
    txn.append_write_record(WriteRecord(WType.UPDATE_TUPLE, "t", Rid(1, 1), b"old"))
    txn.append_write_record(WriteRecord(WType.DELETE_TUPLE, "t", Rid(1, 2), b"gone"))
    manager.abort(txn, None)
    assert handle.calls == [
        ("insert", Rid(1, 2), b"gone"),
        ("update", Rid(1, 1), b"old"),
        ("delete", Rid(1, 0)),
    ]
    assert txn.state is TransactionState.ABORTED
    assert len(txn.write_set) == 0
    assert LockDataId.table(FD) not in manager.lock_manager.lock_table


def test_abort_without_system_manager_fails():
    manager = TransactionManager(LockManager())
    txn = manager.begin(None, None)
    txn.append_write_record(WriteRecord(WType.INSERT_TUPLE, "t", Rid(1, 0)))
    with pytest.raises(InternalError):
        manager.abort(txn, None)


def test_default_concurrency_mode(manager):
    assert manager.concurrency_mode is ConcurrencyMode.TWO_PHASE_LOCKING