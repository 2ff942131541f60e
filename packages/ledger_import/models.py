"""Intermediate representation (IR) of an imported ledger.

The IR is independent of both the CSV dialect it was parsed from and any
accounting-file syntax it is later rendered to. All records are frozen; the
operations in :mod:`ledger_import.operations` build new ledgers instead of
mutating existing ones, so pre- and post-merge ledgers can be compared.

Sign convention
---------------
Posting amounts and account balances use the debit-normal convention: a
positive amount increases a debit-type account (``debit - credit``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from types import MappingProxyType

_ZERO = Decimal(0)


@dataclass(frozen=True, slots=True)
class DualAmount:
    """One economic figure reported in ledger currency and in account currency.

    For accounts held in the ledger currency both fields are equal. Arithmetic
    is component-wise.
    """

    in_ledger_currency: Decimal
    in_account_currency: Decimal

    @classmethod
    def zero(cls) -> DualAmount:
        return cls(_ZERO, _ZERO)

    @classmethod
    def single(cls, value: Decimal) -> DualAmount:
        """An amount whose account currency is the ledger currency."""

        return cls(value, value)

    def is_zero(self) -> bool:
        return self.in_ledger_currency.is_zero() and self.in_account_currency.is_zero()

    def __add__(self, other: DualAmount) -> DualAmount:
        return DualAmount(
            self.in_ledger_currency + other.in_ledger_currency,
            self.in_account_currency + other.in_account_currency,
        )

    def __sub__(self, other: DualAmount) -> DualAmount:
        return DualAmount(
            self.in_ledger_currency - other.in_ledger_currency,
            self.in_account_currency - other.in_account_currency,
        )

    def __neg__(self) -> DualAmount:
        return DualAmount(-self.in_ledger_currency, -self.in_account_currency)


@dataclass(frozen=True, slots=True)
class DateRange:
    start_date: date
    end_date: date


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Signed opening/closing balances and the currency an account is held in."""

    start_balance: DualAmount
    end_balance: DualAmount
    account_currency: str


@dataclass(frozen=True, slots=True)
class Posting:
    account_name: str
    amount: DualAmount


@dataclass(frozen=True, slots=True)
class Transaction:
    date: date
    description: str
    postings: tuple[Posting, ...]

    def is_balanced(self) -> bool:
        """True when postings sum to zero in ledger currency."""

        return sum((p.amount.in_ledger_currency for p in self.postings), _ZERO).is_zero()


@dataclass(frozen=True, slots=True)
class Ledger:
    """The parser's final output.

    Attributes
    ----------
    ledger_name:
        Free-text business/ledger name from the report preamble.
    date_range:
        Reporting period declared in the preamble.
    ledger_currency:
        ISO code of the report's ledger currency.
    accounts:
        Read-only mapping of import account name to :class:`AccountInfo`, in
        document order.
    transactions:
        Transactions in the order produced by the last operation applied.
    """

    ledger_name: str
    date_range: DateRange
    ledger_currency: str
    accounts: Mapping[str, AccountInfo]
    transactions: tuple[Transaction, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.accounts, MappingProxyType):
            object.__setattr__(self, "accounts", MappingProxyType(dict(self.accounts)))

    def account_names(self) -> list[str]:
        return list(self.accounts)

    def with_transactions(self, transactions: Iterable[Transaction]) -> Ledger:
        return replace(self, transactions=tuple(transactions))

    def postings(self) -> list[Posting]:
        return [p for t in self.transactions for p in t.postings]


__all__ = [
    "AccountInfo",
    "DateRange",
    "DualAmount",
    "Ledger",
    "Posting",
    "Transaction",
]
