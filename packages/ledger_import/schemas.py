"""JSON-facing DTOs for an imported :class:`~ledger_import.models.Ledger`.

The IR dataclasses stay free of serialization concerns; ``show --json`` goes
through these pydantic models instead. Decimal figures serialize as strings
(``model_dump(mode="json")``) so no precision is lost.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from .models import AccountInfo, Ledger, Posting, Transaction


class PostingOut(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")

    account: str
    amount: Decimal
    amount_in_account_currency: Decimal

    @classmethod
    def from_posting(cls, posting: Posting) -> PostingOut:
        return cls(
            account=posting.account_name,
            amount=posting.amount.in_ledger_currency,
            amount_in_account_currency=posting.amount.in_account_currency,
        )


class TransactionOut(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")

    date: dt.date
    description: str
    postings: list[PostingOut]

    @classmethod
    def from_transaction(cls, txn: Transaction) -> TransactionOut:
        return cls(
            date=txn.date,
            description=txn.description,
            postings=[PostingOut.from_posting(p) for p in txn.postings],
        )


class AccountBalanceOut(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")

    name: str
    currency: str
    start_balance: Decimal
    end_balance: Decimal
    start_balance_in_account_currency: Decimal
    end_balance_in_account_currency: Decimal

    @classmethod
    def from_account(cls, name: str, info: AccountInfo) -> AccountBalanceOut:
        return cls(
            name=name,
            currency=info.account_currency,
            start_balance=info.start_balance.in_ledger_currency,
            end_balance=info.end_balance.in_ledger_currency,
            start_balance_in_account_currency=info.start_balance.in_account_currency,
            end_balance_in_account_currency=info.end_balance.in_account_currency,
        )


class LedgerDocument(BaseModel):
    """Top-level document printed by ``ledger-import show --json``."""

    model_config = ConfigDict(strict=True, extra="forbid")

    ledger_name: str
    ledger_currency: str
    start_date: dt.date
    end_date: dt.date
    accounts: list[AccountBalanceOut]
    transactions: list[TransactionOut]

    @classmethod
    def from_ledger(cls, ledger: Ledger) -> LedgerDocument:
        return cls(
            ledger_name=ledger.ledger_name,
            ledger_currency=ledger.ledger_currency,
            start_date=ledger.date_range.start_date,
            end_date=ledger.date_range.end_date,
            accounts=[
                AccountBalanceOut.from_account(name, info) for name, info in ledger.accounts.items()
            ],
            transactions=[TransactionOut.from_transaction(t) for t in ledger.transactions],
        )


__all__ = ["AccountBalanceOut", "LedgerDocument", "PostingOut", "TransactionOut"]
