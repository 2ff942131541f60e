"""Render import errors against the source text.

Output shape::

    error: Expected an amount in posting row, found '12.00'
     --> line 7, column 21
      |
    7 | ,2021-01-05,Coffee,,12.00,$88.00
      |                     ^^^^^

Errors without a span (e.g. :class:`~ledger_import.errors.UnbalancedLedgerError`)
render as the message line only.
"""

from __future__ import annotations

from .errors import LedgerImportError
from .tokenizer import Span


def line_and_column(source: str, offset: int) -> tuple[int, int]:
    """1-based line and column of ``offset`` in ``source``."""

    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    return source.count("\n", 0, offset) + 1, offset - line_start + 1


def _source_line(source: str, offset: int) -> tuple[int, str]:
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end < 0:
        line_end = len(source)
    return line_start, source[line_start:line_end].rstrip("\r")


def render_diagnostic(error: LedgerImportError, source: str) -> str:
    header = f"error: {error.message}"
    span: Span | None = error.span
    if span is None:
        return header

    offset = max(0, min(span.offset, len(source)))
    line_no, column = line_and_column(source, offset)
    line_start, text = _source_line(source, offset)
    # Multi-line spans are underlined up to the end of their first line.
    width = max(1, min(span.length, len(text) - (offset - line_start)))
    gutter = " " * len(str(line_no))
    return "\n".join(
        [
            header,
            f"{gutter}--> line {line_no}, column {column}",
            f"{gutter} |",
            f"{line_no} | {text}",
            f"{gutter} | {' ' * (column - 1)}{'^' * width}",
        ]
    )


__all__ = ["line_and_column", "render_diagnostic"]
