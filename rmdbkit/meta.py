"""Catalogue metadata for columns, indexes, tables and databases, with a text on-disk form."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .defs import ColType
from .errors import ColumnNotFoundError, IndexNotFoundError, TableNotFoundError


@dataclass
class ColMeta:
    """A column of a table: its type, byte length and byte offset inside a record."""

    tab_name: str
    name: str
    type: ColType
    len: int
    offset: int
    index: bool = False

    def _dump(self) -> str:
        return f"{self.tab_name} {self.name} {int(self.type)} {self.len} {self.offset} {int(self.index)}"

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> ColMeta:
        return cls(
            tab_name=next(tokens),
            name=next(tokens),
            type=ColType(int(next(tokens))),
            len=int(next(tokens)),
            offset=int(next(tokens)),
            index=bool(int(next(tokens))),
        )


@dataclass
class IndexMeta:
    """An index over one or more columns of a table."""

    tab_name: str
    col_tot_len: int
    col_num: int
    cols: list[ColMeta] = field(default_factory=list)

    @property
    def col_names(self) -> list[str]:
        return [col.name for col in self.cols]

    def _dump(self) -> str:
        head = f"{self.tab_name} {self.col_tot_len} {self.col_num}"
        return head + "".join("\n" + col._dump() for col in self.cols)

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> IndexMeta:
        tab_name = next(tokens)
        col_tot_len = int(next(tokens))
        col_num = int(next(tokens))
        cols = [ColMeta._read(tokens) for _ in range(col_num)]
        return cls(tab_name=tab_name, col_tot_len=col_tot_len, col_num=col_num, cols=cols)


@dataclass
class TabMeta:
    """A table: its columns in record order and the indexes built on it."""

    name: str = ""
    cols: list[ColMeta] = field(default_factory=list)
    indexes: list[IndexMeta] = field(default_factory=list)

    def is_col(self, col_name: str) -> bool:
        return any(col.name == col_name for col in self.cols)

    def is_index(self, col_names: Sequence[str]) -> bool:
        wanted = list(col_names)
        return any(index.col_names == wanted for index in self.indexes)

    def get_index_meta(self, col_names: Sequence[str]) -> IndexMeta:
        wanted = list(col_names)
        for index in self.indexes:
            if index.col_names == wanted:
                return index
        raise IndexNotFoundError(self.name, wanted)

    def get_col(self, col_name: str) -> ColMeta:
        for col in self.cols:
            if col.name == col_name:
                return col
        raise ColumnNotFoundError(col_name)

    def _dump(self) -> str:
        parts = [self.name, str(len(self.cols))]
        parts.extend(col._dump() for col in self.cols)
        parts.append(str(len(self.indexes)))
        parts.extend(index._dump() for index in self.indexes)
        return "\n".join(parts) + "\n"

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> TabMeta:
        name = next(tokens)
        cols = [ColMeta._read(tokens) for _ in range(int(next(tokens)))]
        indexes = [IndexMeta._read(tokens) for _ in range(int(next(tokens)))]
        return cls(name=name, cols=cols, indexes=indexes)


@dataclass
class DbMeta:
    """A database: its name and its tables, kept in name order on disk."""

    name: str = ""
    tabs: dict[str, TabMeta] = field(default_factory=dict)

    def is_table(self, tab_name: str) -> bool:
        return tab_name in self.tabs

    def set_tab_meta(self, tab_name: str, meta: TabMeta) -> None:
        self.tabs[tab_name] = meta

    def get_table(self, tab_name: str) -> TabMeta:
        try:
            return self.tabs[tab_name]
        except KeyError:
            raise TableNotFoundError(tab_name) from None

    def dumps(self) -> str:
        """Serialise to the whitespace-separated text stored in the meta file."""
        out = f"{self.name}\n{len(self.tabs)}\n"
        for tab_name in sorted(self.tabs):
            out += self.tabs[tab_name]._dump() + "\n"
        return out

    @classmethod
    def loads(cls, text: str) -> DbMeta:
        """Parse text produced by :meth:`dumps`."""
        tokens = iter(text.split())
        try:
            name = next(tokens)
            count = int(next(tokens))
            tabs: dict[str, TabMeta] = {}
            for _ in range(count):
                tab = TabMeta._read(tokens)
                tabs[tab.name] = tab
        except (StopIteration, ValueError) as exc:
            raise ValueError("malformed database metadata") from exc
        return cls(name=name, tabs=dict(sorted(tabs.items())))