"""Render result rows as a fixed-width text table into a context buffer."""

from __future__ import annotations

from collections.abc import Sequence

from .context import Context

RECORD_COUNT_LENGTH = 40


class RecordPrinter:
    """Writes table separators and rows, switching to an ellipsis once the buffer is full."""

    COL_WIDTH = 16

    def __init__(self, num_cols: int) -> None:
        if num_cols <= 0:
            raise ValueError("a table needs at least one column")
        self.num_cols = num_cols

    @staticmethod
    def _write(context: Context, text: str) -> bool:
        if not context.ellipsis and context.fits(text, RECORD_COUNT_LENGTH):
            context.append(text)
            return True
        return False

    def print_separator(self, context: Context) -> None:
        cell = "+" + "-" * (self.COL_WIDTH + 2)
        for _ in range(self.num_cols):
            if not self._write(context, cell):
                context.ellipsis = True
        if not self._write(context, "+\n"):
            context.ellipsis = True

    def print_record(self, rec_str: Sequence[str], context: Context) -> None:
        if len(rec_str) != self.num_cols:
            raise ValueError(f"expected {self.num_cols} columns, got {len(rec_str)}")
        for col in rec_str:
            if len(col) > self.COL_WIDTH:
                col = col[: self.COL_WIDTH - 3] + "..."
            if not self._write(context, f"| {col:>{self.COL_WIDTH}} "):
                context.ellipsis = True
        self._write(context, "|\n")

    @staticmethod
    def print_record_count(num_rec: int, context: Context) -> None:
        text = "... ...\n" if context.ellipsis else ""
        text += f"Total record(s): {num_rec}\n"
        context.append(text)