"""Public interface for the ``ledger_import`` package.

This module exposes the import pipeline, the IR types it produces and the
error taxonomy as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .api import import_ledger, load_ledger, read_export_text
from .config import ImportSettings, load_settings
from .diagnostics import render_diagnostic
from .errors import (
    AccountValidationError,
    CellValueError,
    CrossCurrencyError,
    CurrencyMismatch,
    LedgerImportError,
    SchemaError,
    ShapeError,
    TokenizationError,
    UnbalancedLedgerError,
    ValidationFailure,
)
from .models import AccountInfo, DateRange, DualAmount, Ledger, Posting, Transaction
from .operations import check_balanced_per_date, merge_transactions, sort_transactions_by_date

__all__ = [
    # API
    "import_ledger",
    "load_ledger",
    "read_export_text",
    "merge_transactions",
    "sort_transactions_by_date",
    "check_balanced_per_date",
    "render_diagnostic",
    # Settings
    "ImportSettings",
    "load_settings",
    # Models / types
    "Ledger",
    "DateRange",
    "AccountInfo",
    "Transaction",
    "Posting",
    "DualAmount",
    # Errors
    "LedgerImportError",
    "TokenizationError",
    "SchemaError",
    "ShapeError",
    "CellValueError",
    "CrossCurrencyError",
    "CurrencyMismatch",
    "AccountValidationError",
    "ValidationFailure",
    "UnbalancedLedgerError",
]
