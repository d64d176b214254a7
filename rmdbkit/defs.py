"""Core value types, column types, comparison operators and engine constants."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .errors import StringOverflowError

BUFFER_LENGTH = 8192

INVALID_FRAME_ID = -1
INVALID_PAGE_ID = -1
INVALID_TXN_ID = -1
INVALID_TIMESTAMP = -1
INVALID_LSN = -1
HEADER_PAGE_ID = 0
PAGE_SIZE = 4096
BUFFER_POOL_SIZE = 65536
LOG_BUFFER_SIZE = 1024 * PAGE_SIZE
BUCKET_SIZE = 50

LOG_FILE_NAME = "db.log"
REPLACER_TYPE = "LRU"
DB_META_NAME = "db.meta"

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")


@dataclass(frozen=True)
class Rid:
    """Record identifier: page number and slot number."""

    page_no: int
    slot_no: int


class ColType(IntEnum):
    TYPE_INT = 0
    TYPE_FLOAT = 1
    TYPE_STRING = 2


_COLTYPE_NAMES = {
    ColType.TYPE_INT: "INT",
    ColType.TYPE_FLOAT: "FLOAT",
    ColType.TYPE_STRING: "STRING",
}


def coltype2str(col_type: ColType) -> str:
    """Return the display name of a column type."""
    return _COLTYPE_NAMES[ColType(col_type)]


@dataclass(frozen=True, order=True)
class TabCol:
    """A column qualified by its table; ordered by (table, column)."""

    tab_name: str
    col_name: str


@dataclass
class Value:
    """A typed literal, optionally encoded into a fixed-length raw buffer."""

    type: ColType | None = None
    int_val: int = 0
    float_val: float = 0.0
    str_val: str = ""
    raw: bytes | None = field(default=None, repr=False)

    def set_int(self, value: int) -> None:
        self.type = ColType.TYPE_INT
        self.int_val = value

    def set_float(self, value: float) -> None:
        self.type = ColType.TYPE_FLOAT
        self.float_val = value

    def set_str(self, value: str) -> None:
        self.type = ColType.TYPE_STRING
        self.str_val = value

    def init_raw(self, length: int) -> bytes:
        """Encode the value into ``length`` bytes and keep it as ``raw``."""
        if self.raw is not None:
            raise ValueError("raw buffer already initialised")
        if self.type is ColType.TYPE_INT:
            if length != _INT.size:
                raise ValueError(f"int value needs {_INT.size} bytes, got {length}")
            self.raw = _INT.pack(self.int_val)
        elif self.type is ColType.TYPE_FLOAT:
            if length != _FLOAT.size:
                raise ValueError(f"float value needs {_FLOAT.size} bytes, got {length}")
            self.raw = _FLOAT.pack(self.float_val)
        elif self.type is ColType.TYPE_STRING:
            encoded = self.str_val.encode()
            if length < len(encoded):
                raise StringOverflowError()
            self.raw = encoded.ljust(length, b"\0")
        else:
            raise ValueError("value has no type")
        return self.raw


class CompOp(IntEnum):
    OP_EQ = 0
    OP_NE = 1
    OP_LT = 2
    OP_GT = 3
    OP_LE = 4
    OP_GE = 5


@dataclass
class Condition:
    """``lhs_col op rhs``, where the right side is a value or another column."""

    lhs_col: TabCol
    op: CompOp
    is_rhs_val: bool
    rhs_col: TabCol | None = None
    rhs_val: Value = field(default_factory=Value)


@dataclass
class SetClause:
    lhs: TabCol
    rhs: Value