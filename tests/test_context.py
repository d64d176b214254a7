from rmdbkit.context import Context
from rmdbkit.defs import BUFFER_LENGTH


def test_defaults():
    ctx = Context()
    assert ctx.capacity == BUFFER_LENGTH
    assert ctx.offset == 0
    assert ctx.ellipsis is False
    assert ctx.output() == ""


def test_append_accumulates():
    ctx = Context()
    ctx.append("ab")
    ctx.append("cd")
    assert ctx.output() == "abcd"
    assert ctx.offset == 4


def test_fits_is_strict():
    ctx = Context(capacity=10)
    assert ctx.fits("123456789")
    assert not ctx.fits("1234567890")
    assert not ctx.fits("12345", reserve=5)
    assert ctx.fits("1234", reserve=5)


def test_fits_accounts_for_written_bytes():
    ctx = Context(capacity=10)
    ctx.append("12345")
    assert ctx.fits("1234")
    assert not ctx.fits("12345")


def test_managers_kept():
    marker = object()
    ctx = Context(lock_mgr=marker, txn="t")
    assert ctx.lock_mgr is marker
    assert ctx.txn == "t"
    assert ctx.log_mgr is None