"""System manager: database directories, the catalogue and DDL statements."""

from __future__ import annotations

import dataclasses
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .context import Context
from .defs import DB_META_NAME, LOG_FILE_NAME, ColType, coltype2str
from .errors import (
    DatabaseExistsError,
    DatabaseNotFoundError,
    IndexExistsError,
    InternalError,
    TableExistsError,
)
from .meta import ColMeta, DbMeta, IndexMeta, TabMeta
from .record_printer import RecordPrinter

OUTPUT_FILE_NAME = "output.txt"


@dataclass
class ColDef:
    """A column as declared in CREATE TABLE."""

    name: str
    type: ColType
    len: int


class SmManager:
    """Owns the catalogue of the open database and executes DDL against it.

    Record and index storage is delegated to the optional ``rm_manager`` and
    ``ix_manager``; without them only the catalogue is maintained.
    """

    def __init__(
        self,
        disk_manager: Any = None,
        buffer_pool_manager: Any = None,
        rm_manager: Any = None,
        ix_manager: Any = None,
        root: str | Path = ".",
    ) -> None:
        self.disk_manager = disk_manager
        self.buffer_pool_manager = buffer_pool_manager
        self.rm_manager = rm_manager
        self.ix_manager = ix_manager
        self.root = Path(root)
        self.db = DbMeta()
        self.db_path: Path | None = None
        self.fhs: dict[str, Any] = {}
        self.ihs: dict[tuple[str, tuple[str, ...]], Any] = {}

    def _db_dir(self, db_name: str) -> Path:
        return self.root / db_name

    def _require_open(self) -> Path:
        if self.db_path is None:
            raise InternalError("No database is open")
        return self.db_path

    def is_dir(self, db_name: str) -> bool:
        return self._db_dir(db_name).is_dir()

    def create_db(self, db_name: str) -> None:
        """Create the database directory with an empty catalogue and log file."""
        if self.is_dir(db_name):
            raise DatabaseExistsError(db_name)
        path = self._db_dir(db_name)
        path.mkdir(parents=True)
        (path / DB_META_NAME).write_text(DbMeta(name=db_name).dumps())
        (path / LOG_FILE_NAME).touch()

    def drop_db(self, db_name: str) -> None:
        if not self.is_dir(db_name):
            raise DatabaseNotFoundError(db_name)
        path = self._db_dir(db_name)
        if self.db_path is not None and self.db_path.resolve() == path.resolve():
            self.fhs.clear()
            self.ihs.clear()
            self.db = DbMeta()
            self.db_path = None
        shutil.rmtree(path)

    def open_db(self, db_name: str) -> None:
        """Load the catalogue of ``db_name`` and open its table and index files."""
        if not self.is_dir(db_name):
            raise DatabaseNotFoundError(db_name)
        if self.db_path is not None:
            self.close_db()
        path = self._db_dir(db_name)
        self.db = DbMeta.loads((path / DB_META_NAME).read_text())
        self.db_path = path
        for tab_name, tab in self.db.tabs.items():
            if self.rm_manager is not None:
                self.fhs[tab_name] = self.rm_manager.open_file(tab_name)
            if self.ix_manager is not None:
                for index in tab.indexes:
                    key = (tab_name, tuple(index.col_names))
                    self.ihs[key] = self.ix_manager.open_index(tab_name, index.col_names)

    def close_db(self) -> None:
        """Write the catalogue back and close every open file."""
        if self.db_path is None:
            return
        self.flush_meta()
        if self.rm_manager is not None:
            for handle in self.fhs.values():
                self.rm_manager.close_file(handle)
        if self.ix_manager is not None:
            for handle in self.ihs.values():
                self.ix_manager.close_index(handle)
        self.fhs.clear()
        self.ihs.clear()
        self.db = DbMeta()
        self.db_path = None

    def flush_meta(self) -> None:
        path = self._require_open()
        (path / DB_META_NAME).write_text(self.db.dumps())

    def show_tables(self, context: Context) -> None:
        printer = RecordPrinter(1)
        printer.print_separator(context)
        printer.print_record(["Tables"], context)
        printer.print_separator(context)
        lines = ["| Tables |\n"]
        for tab_name in sorted(self.db.tabs):
            printer.print_record([tab_name], context)
            lines.append(f"| {tab_name} |\n")
        printer.print_separator(context)
        out_dir = self.db_path if self.db_path is not None else self.root
        with open(out_dir / OUTPUT_FILE_NAME, "a") as outfile:
            outfile.writelines(lines)

    def desc_table(self, tab_name: str, context: Context) -> None:
        tab = self.db.get_table(tab_name)
        captions = ["Field", "Type", "Index"]
        printer = RecordPrinter(len(captions))
        printer.print_separator(context)
        printer.print_record(captions, context)
        printer.print_separator(context)
        for col in tab.cols:
            printer.print_record([col.name, coltype2str(col.type), "YES" if col.index else "NO"], context)
        printer.print_separator(context)

    def create_table(self, tab_name: str, col_defs: Sequence[ColDef], context: Context | None) -> None:
        if self.db.is_table(tab_name):
            raise TableExistsError(tab_name)
        tab = TabMeta(name=tab_name)
        offset = 0
        for col_def in col_defs:
            tab.cols.append(
                ColMeta(
                    tab_name=tab_name,
                    name=col_def.name,
                    type=col_def.type,
                    len=col_def.len,
                    offset=offset,
                    index=False,
                )
            )
            offset += col_def.len
        if self.rm_manager is not None:
            self.rm_manager.create_file(tab_name, offset)
        self.db.tabs[tab_name] = tab
        if self.rm_manager is not None:
            self.fhs[tab_name] = self.rm_manager.open_file(tab_name)
        self.flush_meta()

    def drop_table(self, tab_name: str, context: Context | None) -> None:
        tab = self.db.get_table(tab_name)
        if self.ix_manager is not None:
            for index in tab.indexes:
                handle = self.ihs.pop((tab_name, tuple(index.col_names)), None)
                if handle is not None:
                    self.ix_manager.close_index(handle)
                self.ix_manager.destroy_index(tab_name, index.col_names)
        if self.rm_manager is not None:
            handle = self.fhs.pop(tab_name, None)
            if handle is not None:
                self.rm_manager.close_file(handle)
            self.rm_manager.destroy_file(tab_name)
        else:
            self.fhs.pop(tab_name, None)
        del self.db.tabs[tab_name]
        self.flush_meta()

    def create_index(self, tab_name: str, col_names: Sequence[str], context: Context | None) -> None:
        tab = self.db.get_table(tab_name)
        names = list(col_names)
        if tab.is_index(names):
            raise IndexExistsError(tab_name, names)
        cols = [tab.get_col(name) for name in names]
        for col in cols:
            col.index = True
        index = IndexMeta(
            tab_name=tab_name,
            col_tot_len=sum(col.len for col in cols),
            col_num=len(cols),
            cols=[dataclasses.replace(col) for col in cols],
        )
        if self.ix_manager is not None:
            self.ix_manager.create_index(tab_name, index.cols)
            self.ihs[(tab_name, tuple(names))] = self.ix_manager.open_index(tab_name, names)
        tab.indexes.append(index)
        self.flush_meta()

    def drop_index(self, tab_name: str, cols: Sequence[str | ColMeta], context: Context | None) -> None:
        """Drop the index over ``cols``, given as column names or column metadata."""
        tab = self.db.get_table(tab_name)
        names = [col.name if isinstance(col, ColMeta) else col for col in cols]
        index = tab.get_index_meta(names)
        tab.indexes.remove(index)
        if self.ix_manager is not None:
            handle = self.ihs.pop((tab_name, tuple(names)), None)
            if handle is not None:
                self.ix_manager.close_index(handle)
            self.ix_manager.destroy_index(tab_name, names)
        else:
            self.ihs.pop((tab_name, tuple(names)), None)
        still_indexed = {name for other in tab.indexes for name in other.col_names}
        for col in tab.cols:
            col.index = col.name in still_indexed
        self.flush_meta()