"""Exception taxonomy for ledger export parsing and reconciliation.

Every failure carries structured fields (reason enums, expected/found values,
source spans) so callers and tests can inspect it without matching on message
text. Human-readable rendering lives in :mod:`ledger_import.diagnostics`.

Hierarchy
---------
- ``LedgerImportError`` (a ``ValueError``, like the adapters' input errors)
  - ``TokenizationError``: malformed quoting, stray characters after a quoted
    cell, or a bare carriage return where a row terminator was expected.
  - ``SchemaError``: the column header row matches neither known layout.
  - ``ShapeError``: a row does not have the cell count or tag expected at the
    current parse position. ``CellValueError`` narrows this to a single cell
    whose text is not a valid amount/date/etc.
  - ``CrossCurrencyError``: disagreement between the ledger-currency and
    account-currency columns (codes, symbols or figures).
  - ``AccountValidationError``: an account block whose redundant balances do
    not reconcile.
  - ``UnbalancedLedgerError``: postings on a calendar date do not sum to zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Posting
    from .tokenizer import Span


class LedgerImportError(ValueError):
    """Base class for every error raised while importing a ledger export."""

    def __init__(self, message: str, *, span: Span | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span


class TokenizationError(LedgerImportError):
    pass


class SchemaError(LedgerImportError):
    """The column header row did not match a known column schema."""

    def __init__(self, message: str, *, found: Sequence[str], span: Span | None = None) -> None:
        super().__init__(message, span=span)
        self.found = tuple(found)


class ShapeError(LedgerImportError):
    """A row (or line) does not have the shape expected at this position."""

    def __init__(
        self,
        message: str,
        *,
        row_shape: str,
        expected: Any = None,
        found: Any = None,
        span: Span | None = None,
    ) -> None:
        super().__init__(message, span=span)
        self.row_shape = row_shape
        self.expected = expected
        self.found = found


class CellValueError(ShapeError):
    """A single cell's text could not be converted to the expected type."""


class CurrencyMismatch(StrEnum):
    LEDGER_CURRENCY_CODE = "ledger_currency_code"
    ACCOUNT_CURRENCY_CODE = "account_currency_code"
    CURRENCY_SYMBOL = "currency_symbol"
    AMOUNT = "amount"
    PRESENCE = "presence"


class CrossCurrencyError(LedgerImportError):
    def __init__(
        self,
        message: str,
        *,
        reason: CurrencyMismatch,
        expected: Any = None,
        found: Any = None,
        span: Span | None = None,
    ) -> None:
        super().__init__(message, span=span)
        self.reason = reason
        self.expected = expected
        self.found = found


class ValidationFailure(StrEnum):
    POSTING_BALANCE_MISMATCH = "posting_balance_mismatch"
    ACCOUNT_TYPE_CONFLICT = "account_type_conflict"
    TOTAL_DEBIT_MISMATCH = "total_debit_mismatch"
    TOTAL_CREDIT_MISMATCH = "total_credit_mismatch"
    ENDING_BALANCE_MISMATCH = "ending_balance_mismatch"
    BALANCE_CHANGE_MISMATCH = "balance_change_mismatch"
    UNDETERMINED_ACCOUNT_TYPE = "undetermined_account_type"
    DUPLICATE_ACCOUNT = "duplicate_account"


class AccountValidationError(LedgerImportError):
    """An account block failed the balance reconciliation checks.

    Attributes
    ----------
    reason:
        Which check failed.
    account_name:
        Name of the offending account block.
    posting_index:
        Zero-based index of the posting row at fault, when the failure is tied
        to one posting.
    expected / found:
        The reported and the recomputed figures, where applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: ValidationFailure,
        account_name: str,
        posting_index: int | None = None,
        expected: Any = None,
        found: Any = None,
        span: Span | None = None,
    ) -> None:
        super().__init__(message, span=span)
        self.reason = reason
        self.account_name = account_name
        self.posting_index = posting_index
        self.expected = expected
        self.found = found


class UnbalancedLedgerError(LedgerImportError):
    """Postings on one calendar date do not sum to zero in ledger currency."""

    def __init__(
        self,
        message: str,
        *,
        date: date,
        postings: Sequence[Posting],
        total: Decimal,
    ) -> None:
        super().__init__(message)
        self.date = date
        self.postings = tuple(postings)
        self.total = total


__all__ = [
    "AccountValidationError",
    "CellValueError",
    "CrossCurrencyError",
    "CurrencyMismatch",
    "LedgerImportError",
    "SchemaError",
    "ShapeError",
    "TokenizationError",
    "UnbalancedLedgerError",
    "ValidationFailure",
]
