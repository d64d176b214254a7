# rmdbkit

Building blocks for a small relational database engine: error types, value
and column definitions, a catalogue with a plain-text on-disk form, a system
manager for DDL statements, a fixed-width result printer, and transactions
with a multi-granularity two-phase lock manager.

## Modules

- `rmdbkit.errors` – the error hierarchy, rooted at `RMDBError`. Every message
  starts with `Error: `, e.g. `TableNotFoundError("t")` reads
  `Error: Table not found: t`.
- `rmdbkit.defs` – `Rid`, `ColType` and `coltype2str`, `TabCol`, `Value`
  (with `set_int`, `set_float`, `set_str` and `init_raw`, which encodes the
  value into a fixed number of little-endian bytes and raises
  `StringOverflowError` when a string is too long), `CompOp`, `Condition`,
  `SetClause`, and engine constants such as `PAGE_SIZE`, `BUFFER_LENGTH`,
  `DB_META_NAME` and `LOG_FILE_NAME`.
- `rmdbkit.context` – `Context`, which carries the lock manager, log manager
  and transaction of a statement and collects the reply text up to a fixed
  capacity (`BUFFER_LENGTH` bytes by default).
- `rmdbkit.record_printer` – `RecordPrinter`, which draws separators and rows
  of 16-character columns into a `Context`. Longer cells are cut and end in
  `...`; once the buffer is nearly full it stops writing rows and
  `print_record_count` adds a `... ...` line before the total.
- `rmdbkit.meta` – `ColMeta`, `IndexMeta`, `TabMeta` and `DbMeta`.
  `DbMeta.dumps` writes the catalogue as whitespace-separated text with tables
  in name order; `DbMeta.loads` reads it back.
- `rmdbkit.system` – `ColDef` and `SmManager`, which creates, opens, closes
  and drops database directories under a root directory, and creates and drops
  tables and indexes, shows tables and describes a table. Every catalogue
  change is written back to `db.meta` in the database directory.
- `rmdbkit.transaction` – `Transaction`, `TransactionState`,
  `IsolationLevel`, `WriteRecord` and `WType`, `LockDataId` (with
  `LockDataId.table`, `LockDataId.record` and the packed 64-bit `key()`),
  `AbortReason` and `TransactionAbortException`.
- `rmdbkit.lock_manager` – `LockManager` with shared, exclusive,
  intention-shared and intention-exclusive locks on tables and shared or
  exclusive locks on records. Record locks first take the matching intention
  lock on the table. Requests never wait: a conflict raises
  `TransactionAbortException` with `AbortReason.DEADLOCK_PREVENTION`, and
  asking for a lock after releasing one raises it with
  `AbortReason.LOCK_ON_SHIRINKING`.
- `rmdbkit.transaction_manager` – `TransactionManager` with `begin`,
  `commit`, `abort` and `get_transaction`, and `ConcurrencyMode`.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

Printing a result table:

```python
from rmdbkit.context import Context
from rmdbkit.record_printer import RecordPrinter

context = Context()
printer = RecordPrinter(2)
printer.print_separator(context)
printer.print_record(["id", "name"], context)
printer.print_separator(context)
RecordPrinter.print_record_count(0, context)
print(context.output())
```

Creating a database and a table:

```python
from rmdbkit.context import Context
from rmdbkit.defs import ColType
from rmdbkit.system import ColDef, SmManager

sm = SmManager(root="data")
sm.create_db("shop")          # data/shop/db.meta and data/shop/db.log
sm.open_db("shop")
sm.create_table(
    "items",
    [ColDef("id", ColType.TYPE_INT, 4), ColDef("name", ColType.TYPE_STRING, 16)],
    None,
)
sm.create_index("items", ["id"], None)

context = Context()
sm.desc_table("items", context)
print(context.output())
sm.close_db()
```

Saving and loading the catalogue as text:

```python
from rmdbkit.defs import ColType
from rmdbkit.meta import ColMeta, DbMeta, TabMeta

db = DbMeta(name="shop")
db.set_tab_meta("items", TabMeta(name="items", cols=[ColMeta("items", "id", ColType.TYPE_INT, 4, 0)]))
restored = DbMeta.loads(db.dumps())
print(restored.get_table("items").get_col("id").len)  # 4
```

Locking:

```python
from rmdbkit.defs import Rid
from rmdbkit.lock_manager import LockManager
from rmdbkit.transaction import Transaction, TransactionAbortException

locks = LockManager()
t1, t2 = Transaction(1), Transaction(2)
locks.lock_shared_on_record(t1, Rid(0, 1), 3)
try:
    locks.lock_exclusive_on_record(t2, Rid(0, 1), 3)
except TransactionAbortException as exc:
    print(exc)  # Transaction 2 aborted for deadlock prevention
```

## What the package does not do

There is no SQL parser, query planner, executor, network server or command
line. The package keeps no record or index files of its own: `SmManager`
manages only the catalogue and directories unless it is given
`rm_manager` and `ix_manager` objects, to which it hands the creating,
opening, closing and destroying of table and index files. Likewise
`TransactionManager.abort` rolls writes back only through the record file
handles found in `sm_manager.fhs`, and flushes a log only through a log
manager object passed to it.