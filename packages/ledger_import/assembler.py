"""Fold a parsed, validated export into the IR :class:`~ledger_import.models.Ledger`."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import AccountValidationError, ValidationFailure
from .header import Header
from .models import AccountInfo, DateRange, Ledger, Posting, Transaction
from .validation import ValidatedAccount, signed_account_info


def assemble_ledger(
    header: Header,
    accounts: Sequence[ValidatedAccount],
    *,
    ledger_currency: str,
) -> Ledger:
    """Build the IR from header metadata and validated account blocks.

    Every posting row becomes a one-posting transaction whose amount is
    ``debit - credit``, in document order (account by account). No numeric
    checks are repeated here.
    """

    balances: dict[str, AccountInfo] = {}
    transactions: list[Transaction] = []
    for validated in accounts:
        block = validated.block
        if block.name in balances:
            raise AccountValidationError(
                f"Account {block.name!r} appears more than once in the export",
                reason=ValidationFailure.DUPLICATE_ACCOUNT,
                account_name=block.name,
                span=block.span,
            )
        balances[block.name] = signed_account_info(block, validated.account_type)
        transactions.extend(
            Transaction(
                date=row.date,
                description=row.description,
                postings=(Posting(block.name, row.amount),),
            )
            for row in block.postings
        )

    return Ledger(
        ledger_name=header.ledger_name,
        date_range=DateRange(header.start_date, header.end_date),
        ledger_currency=ledger_currency,
        accounts=balances,
        transactions=tuple(transactions),
    )


__all__ = ["assemble_ledger"]
