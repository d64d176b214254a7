import errno
import os

import pytest

from rmdbkit import errors
from rmdbkit.errors import (
    AmbiguousColumnError,
    ColumnNotFoundError,
    DatabaseExistsError,
    DatabaseNotFoundError,
    FileAlreadyExistsError,
    FileMissingError,
    FileNotClosedError,
    FileNotOpenError,
    IncompatibleTypeError,
    IndexEntryNotFoundError,
    IndexExistsError,
    IndexNotFoundError,
    InternalError,
    InvalidColLengthError,
    InvalidRecordSizeError,
    InvalidValueCountError,
    PageNotExistError,
    RecordNotFoundError,
    RMDBError,
    StringOverflowError,
    TableExistsError,
    TableNotFoundError,
    UnixError,
)


@pytest.mark.parametrize(
    "exc, fragment",
    [
        (InternalError("Unexpected field type"), "Unexpected field type"),
        (FileNotOpenError(7), "Invalid file descriptor: 7"),
        (FileNotClosedError("t.db"), "File is opened: t.db"),
        (FileAlreadyExistsError("t.db"), "File already exists: t.db"),
        (FileMissingError("t.db"), "File not found: t.db"),
        (InvalidRecordSizeError(5), "Invalid record size: 5"),
        (InvalidColLengthError(9), "Invalid column length: 9"),
        (IndexEntryNotFoundError(), "Index entry not found"),
        (DatabaseNotFoundError("shop"), "Database not found: shop"),
        (DatabaseExistsError("shop"), "Database already exists: shop"),
        (TableNotFoundError("orders"), "Table not found: orders"),
        (TableExistsError("orders"), "Table already exists: orders"),
        (ColumnNotFoundError("price"), "Column not found: price"),
        (InvalidValueCountError(), "Invalid value count"),
        (StringOverflowError(), "String is too long"),
        (AmbiguousColumnError("id"), "Ambiguous column: id"),
    ],
)
def test_messages_are_prefixed(exc, fragment):
    assert str(exc) == "Error: " + fragment
    assert len(exc) == len(str(exc))
    with pytest.raises(RMDBError):
        raise exc


def test_record_not_found_message():
    err = RecordNotFoundError(3, 4)
    assert str(err) == "Error: Record not found: (3,4)"
    assert (err.page_no, err.slot_no) == (3, 4)


def test_index_not_found_joins_columns():
    err = IndexNotFoundError("t", ["a", "b"])
    assert str(err) == "Error: Index not found: t.(a, b)"


def test_index_exists_single_column():
    err = IndexExistsError("t", ["a"])
    assert str(err).startswith("Error: Index already exists: t.(")
    assert str(err).endswith("(a)")


def test_incompatible_type():
    err = IncompatibleTypeError("INT", "STRING")
    assert str(err) == "Error: Incompatible type error: lhs INT, rhs STRING"


def test_page_not_exist_keeps_format():
    err = PageNotExistError("orders", 12)
    assert str(err).startswith("Error: Page 12 in table orders")
    assert err.page_no == 12


def test_unix_error_uses_strerror():
    err = UnixError(errno.ENOENT)
    assert str(err) == "Error: " + os.strerror(errno.ENOENT)
    assert err.errno == errno.ENOENT


def test_subclasses_catchable_as_base():
    err = TableNotFoundError("x")
    with pytest.raises(errors.RMDBError) as info:
        raise err
    assert info.value is err
    assert str(info.value) == "Error: Table not found: x"
    assert err.tab_name == "x"