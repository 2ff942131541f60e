"""Per-account block grammar.

An account block is a fixed, ordered sequence of row shapes::

    ,<account name>,,,,[,,,,,,]
    Starting Balance,,,,,<amount>[,<CUR>,,,,<amount>,<CUR>]
    ,<date>,<description>,<debit>,<credit>,<balance>[,<CUR>,,<debit>,<credit>,<balance>,<CUR>]   (0..n)
    Totals and Ending Balance,,,<debit>,<credit>,<balance>[,<CUR>,,<debit>,<credit>,<balance>,<CUR>]
    Balance Change,,,<amount>,,[,<CUR>,,<amount>,,,<CUR>]

The bracketed columns exist only under
:attr:`~ledger_import.header.ColumnSchema.PER_ACCOUNT_CURRENCY`. Every monetary
value is returned as a :class:`~ledger_import.models.DualAmount`; under the
ledger-currency-only schema both components are the same figure.

Cross-currency checks performed while parsing:

- the ledger currency code column equals the configured ledger currency;
- the account currency code is the same on every row of the block;
- ledger-currency figures carry the ledger currency symbol and account-currency
  figures carry one consistent symbol;
- a debit/credit is present in one currency exactly when it is present in the
  other;
- when the account currency is the ledger currency, both figures are equal.

Balance arithmetic is *not* checked here; see :mod:`ledger_import.validation`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .cells import (
    CURRENCY_SYMBOLS,
    Amount,
    amount_cell,
    amount_cell_opt,
    cell_tag,
    date_cell,
    empty_cell,
    text_cell,
)
from .config import ImportSettings
from .errors import CrossCurrencyError, CurrencyMismatch, ShapeError
from .header import ColumnSchema
from .models import DualAmount
from .tokenizer import Cell, CsvCursor, Row, Span

STARTING_BALANCE_TAG = "Starting Balance"
ENDING_BALANCE_TAG = "Totals and Ending Balance"
BALANCE_CHANGE_TAG = "Balance Change"

_NO_SPAN = Span(0, 0)


@dataclass(frozen=True, slots=True)
class PostingRow:
    """One posting row; exactly one of ``debit``/``credit`` is set."""

    date: date
    description: str
    debit: DualAmount | None
    credit: DualAmount | None
    balance: DualAmount
    span: Span = field(default=_NO_SPAN, compare=False)

    @property
    def debit_or_zero(self) -> DualAmount:
        return self.debit if self.debit is not None else DualAmount.zero()

    @property
    def credit_or_zero(self) -> DualAmount:
        return self.credit if self.credit is not None else DualAmount.zero()

    @property
    def amount(self) -> DualAmount:
        """Signed posting amount, ``debit - credit``."""

        return self.debit_or_zero - self.credit_or_zero


@dataclass(frozen=True, slots=True)
class EndingTotals:
    total_debit: DualAmount
    total_credit: DualAmount
    ending_balance: DualAmount


@dataclass(frozen=True, slots=True)
class AccountBlock:
    name: str
    account_currency: str
    starting_balance: DualAmount
    postings: tuple[PostingRow, ...]
    ending_totals: EndingTotals
    balance_change: DualAmount
    span: Span = field(default=_NO_SPAN, compare=False)


# ---------------------------------------------------------------------------
# Row context
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _BlockCurrency:
    """Currency facts fixed by the starting-balance row of one block."""

    ledger_currency: str
    ledger_symbol: str
    account_currency: str
    account_symbol: str

    @property
    def same_currency(self) -> bool:
        return self.account_currency == self.ledger_currency


def _expect_width(row: Row, schema: ColumnSchema, row_shape: str) -> None:
    if len(row) != schema.width:
        raise ShapeError(
            f"Expected {schema.width} cells in {row_shape}, found {len(row)}",
            row_shape=row_shape,
            expected=schema.width,
            found=len(row),
            span=row.span,
        )


def _expect_empty(row: Row, indices: range | tuple[int, ...], row_shape: str) -> None:
    for i in indices:
        empty_cell(row[i], row_shape=row_shape)


def _check_symbol(amount: Amount, expected: str, cell: Cell, row_shape: str) -> None:
    if amount.currency_symbol != expected:
        raise CrossCurrencyError(
            f"Expected currency symbol {expected!r} in {row_shape}, "
            f"found {amount.currency_symbol!r}",
            reason=CurrencyMismatch.CURRENCY_SYMBOL,
            expected=expected,
            found=amount.currency_symbol,
            span=cell.span,
        )


def _check_codes(row: Row, cur: _BlockCurrency, row_shape: str) -> None:
    ledger_code, account_code = row[6], row[11]
    if ledger_code.text != cur.ledger_currency:
        raise CrossCurrencyError(
            f"Ledger currency in {row_shape} is {ledger_code.text!r}, "
            f"expected {cur.ledger_currency!r}",
            reason=CurrencyMismatch.LEDGER_CURRENCY_CODE,
            expected=cur.ledger_currency,
            found=ledger_code.text,
            span=ledger_code.span,
        )
    if account_code.text != cur.account_currency:
        raise CrossCurrencyError(
            f"Account currency in {row_shape} is {account_code.text!r}, "
            f"expected {cur.account_currency!r}",
            reason=CurrencyMismatch.ACCOUNT_CURRENCY_CODE,
            expected=cur.account_currency,
            found=account_code.text,
            span=account_code.span,
        )


def _dual(
    row: Row,
    ledger_idx: int,
    account_idx: int | None,
    cur: _BlockCurrency,
    row_shape: str,
) -> DualAmount:
    """Read a required figure from the ledger column and, if any, the account column."""

    ledger_cell = row[ledger_idx]
    in_ledger = amount_cell(ledger_cell, row_shape=row_shape)
    _check_symbol(in_ledger, cur.ledger_symbol, ledger_cell, row_shape)
    if account_idx is None:
        return DualAmount.single(in_ledger.amount)

    account_cell = row[account_idx]
    in_account = amount_cell(account_cell, row_shape=row_shape)
    _check_symbol(in_account, cur.account_symbol, account_cell, row_shape)
    _check_same_figure(in_ledger, in_account, cur, account_cell, row_shape)
    return DualAmount(in_ledger.amount, in_account.amount)


def _dual_opt(
    row: Row,
    ledger_idx: int,
    account_idx: int | None,
    cur: _BlockCurrency,
    row_shape: str,
) -> DualAmount | None:
    ledger_cell = row[ledger_idx]
    in_ledger = amount_cell_opt(ledger_cell, row_shape=row_shape)
    if in_ledger is not None:
        _check_symbol(in_ledger, cur.ledger_symbol, ledger_cell, row_shape)
    if account_idx is None:
        return None if in_ledger is None else DualAmount.single(in_ledger.amount)

    account_cell = row[account_idx]
    in_account = amount_cell_opt(account_cell, row_shape=row_shape)
    if (in_ledger is None) != (in_account is None):
        raise CrossCurrencyError(
            f"Figure in {row_shape} is present in only one of the two currencies",
            reason=CurrencyMismatch.PRESENCE,
            expected="present" if in_ledger is not None else "empty",
            found="empty" if in_account is None else "present",
            span=account_cell.span,
        )
    if in_ledger is None or in_account is None:
        return None
    _check_symbol(in_account, cur.account_symbol, account_cell, row_shape)
    _check_same_figure(in_ledger, in_account, cur, account_cell, row_shape)
    return DualAmount(in_ledger.amount, in_account.amount)


def _check_same_figure(
    in_ledger: Amount,
    in_account: Amount,
    cur: _BlockCurrency,
    cell: Cell,
    row_shape: str,
) -> None:
    if cur.same_currency and in_ledger != in_account:
        raise CrossCurrencyError(
            f"Amounts in ledger and account currency differ in {row_shape}: "
            f"{in_ledger.amount} vs {in_account.amount}",
            reason=CurrencyMismatch.AMOUNT,
            expected=in_ledger.amount,
            found=in_account.amount,
            span=cell.span,
        )


def _per_account(schema: ColumnSchema, idx: int) -> int | None:
    return idx if schema is ColumnSchema.PER_ACCOUNT_CURRENCY else None


# ---------------------------------------------------------------------------
# Row shapes
# ---------------------------------------------------------------------------


def account_header_row(row: Row, schema: ColumnSchema) -> str:
    row_shape = "account header row"
    _expect_width(row, schema, row_shape)
    empty_cell(row[0], row_shape=row_shape)
    _expect_empty(row, range(2, schema.width), row_shape)
    return text_cell(row[1])


def starting_balance_row(
    row: Row, schema: ColumnSchema, settings: ImportSettings
) -> tuple[DualAmount, _BlockCurrency]:
    row_shape = "starting balance row"
    _expect_width(row, schema, row_shape)
    cell_tag(row[0], STARTING_BALANCE_TAG, row_shape=row_shape)
    _expect_empty(row, range(1, 5), row_shape)

    cur = _BlockCurrency(
        ledger_currency=settings.ledger_currency,
        ledger_symbol=settings.ledger_currency_symbol,
        account_currency=settings.ledger_currency,
        account_symbol=settings.ledger_currency_symbol,
    )
    if schema is ColumnSchema.GLOBAL_LEDGER_CURRENCY:
        return _dual(row, 5, None, cur, row_shape), cur

    _expect_empty(row, range(7, 10), row_shape)
    account_cell = row[10]
    in_account = amount_cell(account_cell, row_shape=row_shape)
    # The first row of a block fixes the account currency for the rest of it.
    cur.account_currency = row[11].text
    cur.account_symbol = in_account.currency_symbol
    known = CURRENCY_SYMBOLS.get(in_account.currency_symbol)
    if known is not None and cur.account_currency in CURRENCY_SYMBOLS.values():
        if known != cur.account_currency:
            raise CrossCurrencyError(
                f"Account currency {cur.account_currency!r} is printed with "
                f"symbol {in_account.currency_symbol!r}",
                reason=CurrencyMismatch.CURRENCY_SYMBOL,
                expected=cur.account_currency,
                found=known,
                span=account_cell.span,
            )
    _check_codes(row, cur, row_shape)
    return _dual(row, 5, 10, cur, row_shape), cur


def posting_row(row: Row, schema: ColumnSchema, cur: _BlockCurrency) -> PostingRow:
    row_shape = "posting row"
    _expect_width(row, schema, row_shape)
    empty_cell(row[0], row_shape=row_shape)
    posted = date_cell(row[1], row_shape=row_shape)
    description = text_cell(row[2])
    if schema is ColumnSchema.PER_ACCOUNT_CURRENCY:
        _check_codes(row, cur, row_shape)
        empty_cell(row[7], row_shape=row_shape)
    debit = _dual_opt(row, 3, _per_account(schema, 8), cur, row_shape)
    credit = _dual_opt(row, 4, _per_account(schema, 9), cur, row_shape)
    if (debit is None) == (credit is None):
        raise ShapeError(
            "Exactly one of debit and credit must be present in a posting row",
            row_shape=row_shape,
            expected="exactly one of debit/credit",
            found="both" if debit is not None else "neither",
            span=row.span,
        )
    balance = _dual(row, 5, _per_account(schema, 10), cur, row_shape)
    return PostingRow(posted, description, debit, credit, balance, span=row.span)


def ending_balance_row(row: Row, schema: ColumnSchema, cur: _BlockCurrency) -> EndingTotals:
    row_shape = "ending balance row"
    _expect_width(row, schema, row_shape)
    cell_tag(row[0], ENDING_BALANCE_TAG, row_shape=row_shape)
    _expect_empty(row, (1, 2), row_shape)
    if schema is ColumnSchema.PER_ACCOUNT_CURRENCY:
        _check_codes(row, cur, row_shape)
        empty_cell(row[7], row_shape=row_shape)
    return EndingTotals(
        total_debit=_dual(row, 3, _per_account(schema, 8), cur, row_shape),
        total_credit=_dual(row, 4, _per_account(schema, 9), cur, row_shape),
        ending_balance=_dual(row, 5, _per_account(schema, 10), cur, row_shape),
    )


def balance_change_row(row: Row, schema: ColumnSchema, cur: _BlockCurrency) -> DualAmount:
    row_shape = "balance change row"
    _expect_width(row, schema, row_shape)
    cell_tag(row[0], BALANCE_CHANGE_TAG, row_shape=row_shape)
    _expect_empty(row, (1, 2, 4, 5), row_shape)
    if schema is ColumnSchema.PER_ACCOUNT_CURRENCY:
        _check_codes(row, cur, row_shape)
        _expect_empty(row, (7, 9, 10), row_shape)
    return _dual(row, 3, _per_account(schema, 8), cur, row_shape)


# ---------------------------------------------------------------------------
# Block
# ---------------------------------------------------------------------------


def _read_row(cursor: CsvCursor, expected: str) -> Row:
    if cursor.at_end():
        raise ShapeError(
            f"Unexpected end of input, expected {expected}",
            row_shape=expected,
            expected=expected,
            found=None,
            span=Span(cursor.pos, 0),
        )
    return cursor.read_row()


def parse_account_block(
    cursor: CsvCursor, schema: ColumnSchema, settings: ImportSettings
) -> AccountBlock:
    """Parse one account block at the cursor.

    Raises the first :class:`~ledger_import.errors.LedgerImportError` found;
    the block's balances are not reconciled here.
    """

    start = cursor.pos
    name = account_header_row(_read_row(cursor, "account header row"), schema)
    starting_balance, cur = starting_balance_row(
        _read_row(cursor, "starting balance row"), schema, settings
    )

    postings: list[PostingRow] = []
    while True:
        row = _read_row(cursor, "posting row or ending balance row")
        first = row[0].text
        if first == ENDING_BALANCE_TAG:
            ending_totals = ending_balance_row(row, schema, cur)
            break
        if first != "":
            raise ShapeError(
                f"Expected a posting row or {ENDING_BALANCE_TAG!r}, found {first!r}",
                row_shape="posting row",
                expected=ENDING_BALANCE_TAG,
                found=first,
                span=row[0].span,
            )
        postings.append(posting_row(row, schema, cur))

    balance_change = balance_change_row(_read_row(cursor, "balance change row"), schema, cur)
    return AccountBlock(
        name=name,
        account_currency=cur.account_currency,
        starting_balance=starting_balance,
        postings=tuple(postings),
        ending_totals=ending_totals,
        balance_change=balance_change,
        span=Span.between(start, cursor.pos),
    )


__all__ = [
    "AccountBlock",
    "BALANCE_CHANGE_TAG",
    "ENDING_BALANCE_TAG",
    "EndingTotals",
    "PostingRow",
    "STARTING_BALANCE_TAG",
    "account_header_row",
    "balance_change_row",
    "ending_balance_row",
    "parse_account_block",
    "posting_row",
    "starting_balance_row",
]
