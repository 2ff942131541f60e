"""Top-level grammar of a ledger export: preamble followed by account blocks.

Account blocks are separated by a row holding a single empty cell (usually
written ``""``). The separator is required between two blocks and optional
after the last one; nothing else may follow.
"""

from __future__ import annotations

from dataclasses import dataclass

from .account import AccountBlock, parse_account_block
from .config import ImportSettings, load_settings
from .errors import ShapeError
from .header import Header, parse_header
from .logging_setup import get_logger
from .tokenizer import CsvCursor

logger = get_logger(__name__)

BYTE_ORDER_MARK = "\ufeff"


@dataclass(frozen=True, slots=True)
class ParsedExport:
    header: Header
    accounts: tuple[AccountBlock, ...]


def strip_byte_order_mark(text: str) -> str:
    return text[1:] if text.startswith(BYTE_ORDER_MARK) else text


def _block_separator(cursor: CsvCursor) -> None:
    row = cursor.read_row()
    if row.texts != ("",):
        raise ShapeError(
            "Expected a row with a single empty cell between account blocks",
            row_shape="block separator row",
            expected=("",),
            found=row.texts,
            span=row.span,
        )


def parse_ledger_export(text: str, settings: ImportSettings | None = None) -> ParsedExport:
    """Parse the whole export text.

    The column schema decided by the header row is passed down unchanged to
    every account block. Balance reconciliation is left to
    :mod:`ledger_import.validation`.
    """

    settings = settings or load_settings()
    cursor = CsvCursor(strip_byte_order_mark(text))
    header = parse_header(cursor)

    accounts: list[AccountBlock] = []
    while not cursor.at_end():
        if accounts:
            _block_separator(cursor)
            if cursor.at_end():
                break
        block = parse_account_block(cursor, header.column_schema, settings)
        logger.debug("Parsed account block %r (%d postings)", block.name, len(block.postings))
        accounts.append(block)

    return ParsedExport(header, tuple(accounts))


__all__ = ["BYTE_ORDER_MARK", "ParsedExport", "parse_ledger_export", "strip_byte_order_mark"]
