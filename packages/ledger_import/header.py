"""Report preamble and column-schema detection.

The preamble is a fixed sequence of raw lines followed by the column header
row::

    Account Transactions
    <ledger name>
    Date Range: <YYYY-MM-DD> to <YYYY-MM-DD>
    Report Type: Accrual (Paid & Unpaid)
    ACCOUNT NUMBER,DATE,DESCRIPTION,...

The header row is the only place the column schema is decided; every later
row is parsed according to the value returned here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from .cells import line_tag, parse_date_range
from .errors import SchemaError
from .logging_setup import get_logger
from .tokenizer import Cell, CsvCursor, Span

logger = get_logger(__name__)

TITLE_LINE = "Account Transactions"
REPORT_TYPE_LINE = "Report Type: Accrual (Paid & Unpaid)"

_LEDGER_CURRENCY_COLUMNS: tuple[str, ...] = (
    "ACCOUNT NUMBER",
    "DATE",
    "DESCRIPTION",
    "DEBIT (In Business Currency)",
    "CREDIT (In Business Currency)",
    "BALANCE (In Business Currency)",
)
_ACCOUNT_CURRENCY_COLUMNS: tuple[str, ...] = _LEDGER_CURRENCY_COLUMNS + (
    "Business Currency",
    "",
    "DEBIT (In Account Currency)",
    "CREDIT (In Account Currency)",
    "BALANCE (In Account Currency)",
    "Account Currency",
)


class ColumnSchema(Enum):
    # No currency columns; every amount is in the ledger currency.
    GLOBAL_LEDGER_CURRENCY = "global_ledger_currency"
    # Each row repeats its figures in the account's own currency.
    PER_ACCOUNT_CURRENCY = "per_account_currency"

    @property
    def columns(self) -> tuple[str, ...]:
        if self is ColumnSchema.GLOBAL_LEDGER_CURRENCY:
            return _LEDGER_CURRENCY_COLUMNS
        return _ACCOUNT_CURRENCY_COLUMNS

    @property
    def width(self) -> int:
        return len(self.columns)


@dataclass(frozen=True, slots=True)
class Header:
    ledger_name: str
    start_date: date
    end_date: date
    column_schema: ColumnSchema


def parse_header(cursor: CsvCursor) -> Header:
    """Consume the preamble and the column header row."""

    line_tag(cursor.read_line(), TITLE_LINE, row_shape="title line")
    ledger_name = cursor.read_line().text
    start_date, end_date = parse_date_range(cursor.read_line())
    line_tag(cursor.read_line(), REPORT_TYPE_LINE, row_shape="report type line")
    column_schema = parse_column_header(cursor)
    logger.debug(
        "Parsed header for %r (%s to %s), schema=%s",
        ledger_name,
        start_date,
        end_date,
        column_schema.value,
    )
    return Header(ledger_name, start_date, end_date, column_schema)


def parse_column_header(cursor: CsvCursor) -> ColumnSchema:
    row = cursor.read_row()
    texts = row.texts
    for schema in ColumnSchema:
        if texts == schema.columns:
            return schema
    raise SchemaError(
        "Column header row matches neither the ledger-currency nor the "
        "account-currency layout",
        found=texts,
        span=_first_difference(row.cells) or row.span,
    )


def _first_difference(cells: tuple[Cell, ...]) -> Span | None:
    # Point at the first cell that departs from the longer, more specific layout.
    for cell, expected in zip(cells, _ACCOUNT_CURRENCY_COLUMNS, strict=False):
        if cell.text != expected:
            return cell.span
    return None


__all__ = ["ColumnSchema", "Header", "REPORT_TYPE_LINE", "TITLE_LINE", "parse_header"]
