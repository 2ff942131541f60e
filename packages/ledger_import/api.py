"""Public pipeline for importing a ledger export.

- :func:`load_ledger`: parse, validate every account block and assemble the
  pre-merge IR (one posting per transaction).
- :func:`import_ledger`: ``load_ledger`` followed by merging, date ordering
  and the per-date balance check.

Both accept the export as ``str``, ``bytes`` or an open text/binary stream.
Nothing is written anywhere; the first error aborts the import and no partial
ledger is returned.
"""

from __future__ import annotations

from typing import IO, TypeAlias

from .assembler import assemble_ledger
from .config import ImportSettings, load_settings
from .logging_setup import get_logger
from .models import Ledger
from .operations import check_balanced_per_date, merge_transactions, sort_transactions_by_date
from .parser import parse_ledger_export, strip_byte_order_mark
from .validation import validate_accounts

logger = get_logger(__name__)

ExportSource: TypeAlias = str | bytes | IO[str] | IO[bytes]


def read_export_text(source: ExportSource) -> str:
    """Return the export as text with any leading byte-order mark removed.

    Bytes are decoded as UTF-8; a ``UnicodeDecodeError`` propagates.
    """

    data = source if isinstance(source, str | bytes) else source.read()
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    return strip_byte_order_mark(text)


def load_ledger(source: ExportSource, *, settings: ImportSettings | None = None) -> Ledger:
    settings = settings or load_settings()
    text = read_export_text(source)
    parsed = parse_ledger_export(text, settings)
    validated = validate_accounts(parsed.accounts)
    ledger = assemble_ledger(parsed.header, validated, ledger_currency=settings.ledger_currency)
    logger.info(
        "Loaded ledger %r: %d accounts, %d postings",
        ledger.ledger_name,
        len(ledger.accounts),
        len(ledger.transactions),
    )
    return ledger


def import_ledger(source: ExportSource, *, settings: ImportSettings | None = None) -> Ledger:
    """Run the full pipeline and return the merged, date-ordered ledger.

    Raises
    ------
    LedgerImportError
        Any parse, cross-currency, validation or balance failure.
    """

    ledger = load_ledger(source, settings=settings)
    ledger = merge_transactions(ledger)
    ledger = sort_transactions_by_date(ledger)
    check_balanced_per_date(ledger)
    return ledger


__all__ = ["ExportSource", "import_ledger", "load_ledger", "read_export_text"]
