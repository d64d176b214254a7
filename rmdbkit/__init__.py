"""Catalogue metadata, system manager, result printing and two-phase locking for a small relational database engine."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "defs",
    "context",
    "record_printer",
    "meta",
    "system",
    "transaction",
    "lock_manager",
    "transaction_manager",
]