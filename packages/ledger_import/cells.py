"""Typed cell parsers: amounts, dates, fixed tags and free text.

Each helper converts the decoded text of one :class:`~ledger_import.tokenizer.Cell`
into a typed value, or raises :class:`~ledger_import.errors.CellValueError`
pointing at the cell's span. ``*_opt`` variants map an empty cell to ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation

from .errors import CellValueError, ShapeError
from .tokenizer import Cell, Line, Span

# Symbol text -> ISO currency code. Adding a currency is a one-line change.
CURRENCY_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "CHF": "CHF",
    "¥": "JPY",
}


def symbol_for_currency(code: str) -> str | None:
    for symbol, known in CURRENCY_SYMBOLS.items():
        if known == code:
            return symbol
    return None


def _amount_pattern() -> re.Pattern[str]:
    # Longest symbols first so multi-character codes win over prefixes.
    symbols = sorted(CURRENCY_SYMBOLS, key=len, reverse=True)
    alternation = "|".join(re.escape(s) for s in symbols)
    return re.compile(
        rf"(?P<outer>-)?(?P<symbol>{alternation})(?P<inner>-)?"
        r"(?P<number>[0-9]+(?:,[0-9]+)*(?:\.[0-9]+)?)"
    )


_AMOUNT_RE = _amount_pattern()
_DATE_RE = re.compile(r"(?P<year>[0-9]+)-(?P<month>[0-9]+)-(?P<day>[0-9]+)")
_DATE_RANGE_PREFIX = "Date Range: "
_DATE_RANGE_SEPARATOR = " to "


@dataclass(frozen=True, slots=True)
class Amount:
    """A signed decimal figure together with the currency symbol it was printed with."""

    amount: Decimal
    currency_symbol: str


# ---------------------------------------------------------------------------
# Pure text parsers
# ---------------------------------------------------------------------------


def parse_amount(text: str) -> Amount:
    """Parse ``[-]<symbol>[-]<digits>(,<digits>)*(.<digits>)?``.

    Both ``-$123.45`` and ``$-123.45`` are accepted; a sign on both sides is
    rejected. Thousands separators are stripped before decimal conversion.

    Raises
    ------
    ValueError
        If ``text`` is not an amount.
    """

    m = _AMOUNT_RE.fullmatch(text)
    if m is None or (m["outer"] and m["inner"]):
        raise ValueError(f"invalid amount: {text!r}")
    try:
        value = Decimal(m["number"].replace(",", ""))
    except InvalidOperation as exc:  # pragma: no cover - regex already guards
        raise ValueError(f"invalid amount: {text!r}") from exc
    if m["outer"] or m["inner"]:
        value = -value
    return Amount(value, m["symbol"])


def parse_date(text: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` date.

    The year must have exactly four digits and month/day exactly two; the
    result must be a real calendar date.
    """

    m = _DATE_RE.fullmatch(text)
    if m is None:
        raise ValueError(f"invalid date: {text!r}")
    if (len(m["year"]), len(m["month"]), len(m["day"])) != (4, 2, 2):
        raise ValueError(f"invalid number of digits in date: {text!r}")
    try:
        return date(int(m["year"]), int(m["month"]), int(m["day"]))
    except ValueError as exc:
        raise ValueError(f"invalid calendar date: {text!r}") from exc


# ---------------------------------------------------------------------------
# Cell-level parsers (raise CellValueError with the cell span)
# ---------------------------------------------------------------------------


def amount_cell(cell: Cell, *, row_shape: str) -> Amount:
    try:
        return parse_amount(cell.text)
    except ValueError:
        raise CellValueError(
            f"Expected an amount in {row_shape}, found {cell.text!r}",
            row_shape=row_shape,
            expected="amount",
            found=cell.text,
            span=cell.span,
        ) from None


def amount_cell_opt(cell: Cell, *, row_shape: str) -> Amount | None:
    if cell.text == "":
        return None
    return amount_cell(cell, row_shape=row_shape)


def date_cell(cell: Cell, *, row_shape: str) -> date:
    try:
        return parse_date(cell.text)
    except ValueError as exc:
        raise CellValueError(
            f"Expected a YYYY-MM-DD date in {row_shape}, found {cell.text!r} ({exc})",
            row_shape=row_shape,
            expected="date",
            found=cell.text,
            span=cell.span,
        ) from None


def cell_tag(cell: Cell, expected: str, *, row_shape: str) -> None:
    if cell.text != expected:
        what = "an empty cell" if expected == "" else repr(expected)
        raise CellValueError(
            f"Expected {what} in {row_shape}, found {cell.text!r}",
            row_shape=row_shape,
            expected=expected,
            found=cell.text,
            span=cell.span,
        )


def empty_cell(cell: Cell, *, row_shape: str) -> None:
    cell_tag(cell, "", row_shape=row_shape)


def text_cell(cell: Cell) -> str:
    return cell.text


# ---------------------------------------------------------------------------
# Preamble lines
# ---------------------------------------------------------------------------


def line_tag(line: Line, expected: str, *, row_shape: str) -> None:
    if line.text != expected:
        raise ShapeError(
            f"Expected line {expected!r}, found {line.text!r}",
            row_shape=row_shape,
            expected=expected,
            found=line.text,
            span=line.span,
        )


def parse_date_range(line: Line) -> tuple[date, date]:
    """Parse ``Date Range: <date> to <date>``."""

    row_shape = "date range line"
    text = line.text
    if not text.startswith(_DATE_RANGE_PREFIX):
        raise ShapeError(
            f"Expected a line starting with {_DATE_RANGE_PREFIX!r}, found {text!r}",
            row_shape=row_shape,
            expected=_DATE_RANGE_PREFIX,
            found=text,
            span=line.span,
        )
    body = text[len(_DATE_RANGE_PREFIX) :]
    start_text, sep, end_text = body.partition(_DATE_RANGE_SEPARATOR)
    if not sep:
        raise ShapeError(
            f"Expected '<date> to <date>', found {body!r}",
            row_shape=row_shape,
            expected="<date> to <date>",
            found=body,
            span=line.span,
        )
    base = line.span.offset + len(_DATE_RANGE_PREFIX)
    start_span = Span(base, len(start_text))
    end_span = Span(base + len(start_text) + len(sep), len(end_text))
    start = date_cell(Cell(start_text, start_span), row_shape=row_shape)
    end = date_cell(Cell(end_text, end_span), row_shape=row_shape)
    return start, end


__all__ = [
    "CURRENCY_SYMBOLS",
    "Amount",
    "amount_cell",
    "amount_cell_opt",
    "cell_tag",
    "date_cell",
    "empty_cell",
    "line_tag",
    "parse_amount",
    "parse_date",
    "parse_date_range",
    "symbol_for_currency",
    "text_cell",
]
