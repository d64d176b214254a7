import pytest

from rmdbkit.defs import Rid
from rmdbkit.lock_manager import GroupLockMode, LockManager, LockMode
from rmdbkit.transaction import (
    AbortReason,
    LockDataId,
    Transaction,
    TransactionAbortException,
    TransactionState,
)

FD = 3
RID = Rid(1, 2)


@pytest.fixture
def manager():
    return LockManager()


def test_shared_record_locks_coexist(manager):
    t1, t2 = Transaction(1), Transaction(2)
    assert manager.lock_shared_on_record(t1, RID, FD)
    assert manager.lock_shared_on_record(t2, RID, FD)
    assert manager.lock_table[LockDataId.record(FD, RID)].group_lock_mode is GroupLockMode.S
    assert manager.lock_table[LockDataId.table(FD)].group_lock_mode is GroupLockMode.IS


def test_lock_moves_to_growing_and_records_ids(manager):
    txn = Transaction(1)
    manager.lock_exclusive_on_record(txn, RID, FD)
    assert txn.state is TransactionState.GROWING
    assert txn.lock_set == {LockDataId.table(FD), LockDataId.record(FD, RID)}


def test_exclusive_conflict_aborts(manager):
    t1, t2 = Transaction(1), Transaction(2)
    manager.lock_shared_on_record(t1, RID, FD)
    with pytest.raises(TransactionAbortException) as info:
        manager.lock_exclusive_on_record(t2, RID, FD)
    assert info.value.abort_reason is AbortReason.DEADLOCK_PREVENTION
    assert info.value.txn_id == 2


def test_table_exclusive_conflicts_with_intention(manager):
    t1, t2 = Transaction(1), Transaction(2)
    manager.lock_ix_on_table(t1, FD)
    with pytest.raises(TransactionAbortException):
        manager.lock_exclusive_on_table(t2, FD)


def test_upgrade_shared_to_exclusive_alone(manager):
    txn = Transaction(1)
    manager.lock_shared_on_table(txn, FD)
    assert manager.lock_exclusive_on_table(txn, FD)
    queue = manager.lock_table[LockDataId.table(FD)]
    assert queue.group_lock_mode is GroupLockMode.X
    assert len(queue.request_queue) == 1


def test_shared_plus_intention_exclusive_is_six(manager):
    txn = Transaction(1)
    manager.lock_shared_on_table(txn, FD)
    manager.lock_ix_on_table(txn, FD)
    queue = manager.lock_table[LockDataId.table(FD)]
    assert queue.request_queue[0].lock_mode is LockMode.S_IX
    assert queue.group_lock_mode.name == "SIX"


def test_repeat_lock_keeps_one_request(manager):
    txn = Transaction(1)
    manager.lock_exclusive_on_table(txn, FD)
    assert manager.lock_shared_on_table(txn, FD)
    queue = manager.lock_table[LockDataId.table(FD)]
    assert [req.lock_mode for req in queue.request_queue] == [LockMode.EXCLUSIVE]


def test_unlock_enters_shrinking_and_blocks_new_locks(manager):
    txn = Transaction(1)
    manager.lock_shared_on_table(txn, FD)
    assert manager.unlock(txn, LockDataId.table(FD))
    assert txn.state is TransactionState.SHRINKING
    assert LockDataId.table(FD) not in manager.lock_table
    with pytest.raises(TransactionAbortException) as info:
        manager.lock_shared_on_table(txn, FD)
    assert info.value.abort_reason is AbortReason.LOCK_ON_SHIRINKING


def test_unlock_unknown_returns_false(manager):
    assert manager.unlock(Transaction(1), LockDataId.table(FD)) is False


def test_unlock_lets_other_transaction_in(manager):
    t1, t2 = Transaction(1), Transaction(2)
    manager.lock_exclusive_on_table(t1, FD)
    manager.unlock(t1, LockDataId.table(FD))
    assert manager.lock_exclusive_on_table(t2, FD)
    assert manager.lock_table[LockDataId.table(FD)].request_queue[0].txn_id == 2