"""Account reconciliation and debit/credit type inference.

The export never states whether an account grows on debit or on credit. Both
readings are simulated independently over the posting rows:

- debit-type: ``balance' = balance + debit - credit``
- credit-type: ``balance' = balance - debit + credit``

Each simulation either reaches the end with every reported running balance
reproduced, or stops at the first posting it cannot explain. Exactly one
surviving reading gives the account type. When both survive (every posting is
zero) the type is undetermined; when neither survives the block is rejected at
the posting where the longer-lived reading broke.

The totals row and the balance-change row are then checked against the
folded figures. Both currency axes are simulated; for foreign-currency
accounts they must agree on the type.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TypeAlias

from .account import AccountBlock, PostingRow
from .errors import AccountValidationError, ValidationFailure
from .logging_setup import get_logger
from .models import AccountInfo, DualAmount

logger = get_logger(__name__)


class AccountType(Enum):
    DEBIT = "debit"
    CREDIT = "credit"


_Axis: TypeAlias = Callable[[DualAmount], Decimal]


def _ledger_axis(a: DualAmount) -> Decimal:
    return a.in_ledger_currency


def _account_axis(a: DualAmount) -> Decimal:
    return a.in_account_currency


@dataclass(frozen=True, slots=True)
class Simulation:
    """Outcome of folding postings under one account-type hypothesis.

    ``failed_at`` is the index of the first posting whose reported balance
    disagrees with the hypothesis, or ``None`` if every posting agreed.
    ``final_balance`` is the last balance reached before any failure.
    """

    account_type: AccountType
    final_balance: Decimal
    failed_at: int | None = None
    expected: Decimal | None = None

    @property
    def ok(self) -> bool:
        return self.failed_at is None


def simulate(
    starting_balance: Decimal,
    postings: Sequence[PostingRow],
    account_type: AccountType,
    axis: _Axis = _ledger_axis,
) -> Simulation:
    balance = starting_balance
    for i, posting in enumerate(postings):
        delta = axis(posting.debit_or_zero) - axis(posting.credit_or_zero)
        candidate = balance + delta if account_type is AccountType.DEBIT else balance - delta
        if axis(posting.balance) != candidate:
            return Simulation(account_type, balance, failed_at=i, expected=candidate)
        balance = candidate
    return Simulation(account_type, balance)


def infer_account_type(
    block: AccountBlock, axis: _Axis = _ledger_axis
) -> tuple[AccountType | None, Decimal]:
    """Infer the account type along one currency axis.

    Returns the type (``None`` when both readings explain every posting) and
    the final folded balance.
    """

    start = axis(block.starting_balance)
    as_debit = simulate(start, block.postings, AccountType.DEBIT, axis)
    as_credit = simulate(start, block.postings, AccountType.CREDIT, axis)

    if as_debit.ok and as_credit.ok:
        return None, as_debit.final_balance
    if as_debit.ok:
        return AccountType.DEBIT, as_debit.final_balance
    if as_credit.ok:
        return AccountType.CREDIT, as_credit.final_balance

    # Neither reading holds throughout: report where the confirmed one broke.
    broken = max(as_debit, as_credit, key=lambda s: s.failed_at or 0)
    index = broken.failed_at
    if index is None:
        raise RuntimeError(f"no failing posting recorded for account {block.name!r}")
    posting = block.postings[index]
    raise AccountValidationError(
        f"Posting balance mismatch in account {block.name!r} at posting {index + 1} "
        f"({posting.date}, {posting.description!r}): reported {axis(posting.balance)}, "
        f"expected {broken.expected} for a {broken.account_type.value}-type account",
        reason=ValidationFailure.POSTING_BALANCE_MISMATCH,
        account_name=block.name,
        posting_index=index,
        expected=broken.expected,
        found=axis(posting.balance),
        span=posting.span,
    )


def _fail(
    block: AccountBlock, reason: ValidationFailure, label: str, expected, found
) -> AccountValidationError:
    return AccountValidationError(
        f"{label} in account {block.name!r}: reported {found}, computed {expected}",
        reason=reason,
        account_name=block.name,
        expected=expected,
        found=found,
        span=block.span,
    )


def validate_account(block: AccountBlock) -> AccountType | None:
    """Prove that ``block`` is internally consistent and return its type.

    Raises
    ------
    AccountValidationError
        On the first inconsistency: a running balance neither reading explains,
        the two currency axes disagreeing on the type, totals or ending balance
        not matching the folded postings, ``start + change != end``, or an
        account whose type cannot be determined while carrying a balance.
    """

    account_type, final_ledger = infer_account_type(block, _ledger_axis)
    account_axis_type, final_account = infer_account_type(block, _account_axis)
    if (
        account_type is not None
        and account_axis_type is not None
        and account_type is not account_axis_type
    ):
        raise AccountValidationError(
            f"Account {block.name!r} behaves as {account_type.value}-type in ledger "
            f"currency but {account_axis_type.value}-type in account currency",
            reason=ValidationFailure.ACCOUNT_TYPE_CONFLICT,
            account_name=block.name,
            expected=account_type,
            found=account_axis_type,
            span=block.span,
        )
    account_type = account_type or account_axis_type

    total_debit = sum((p.debit_or_zero for p in block.postings), DualAmount.zero())
    total_credit = sum((p.credit_or_zero for p in block.postings), DualAmount.zero())
    totals = block.ending_totals
    final = DualAmount(final_ledger, final_account)

    if total_debit != totals.total_debit:
        raise _fail(
            block,
            ValidationFailure.TOTAL_DEBIT_MISMATCH,
            "Total debit mismatch",
            total_debit,
            totals.total_debit,
        )
    if total_credit != totals.total_credit:
        raise _fail(
            block,
            ValidationFailure.TOTAL_CREDIT_MISMATCH,
            "Total credit mismatch",
            total_credit,
            totals.total_credit,
        )
    if final != totals.ending_balance:
        raise _fail(
            block,
            ValidationFailure.ENDING_BALANCE_MISMATCH,
            "Ending balance mismatch",
            final,
            totals.ending_balance,
        )
    if block.starting_balance + block.balance_change != totals.ending_balance:
        raise _fail(
            block,
            ValidationFailure.BALANCE_CHANGE_MISMATCH,
            "Balance change mismatch",
            totals.ending_balance - block.starting_balance,
            block.balance_change,
        )
    if account_type is None and not (
        block.starting_balance.is_zero() and totals.ending_balance.is_zero()
    ):
        raise AccountValidationError(
            f"Couldn't determine account type (debit vs credit) of account {block.name!r}",
            reason=ValidationFailure.UNDETERMINED_ACCOUNT_TYPE,
            account_name=block.name,
            span=block.span,
        )

    logger.debug(
        "Validated account %r: %d postings, type=%s",
        block.name,
        len(block.postings),
        account_type.value if account_type else None,
    )
    return account_type


@dataclass(frozen=True, slots=True)
class ValidatedAccount:
    block: AccountBlock
    account_type: AccountType | None


def validate_accounts(blocks: Sequence[AccountBlock]) -> list[ValidatedAccount]:
    return [ValidatedAccount(block, validate_account(block)) for block in blocks]


def signed_account_info(block: AccountBlock, account_type: AccountType | None) -> AccountInfo:
    """Opening/closing balances in the debit-normal convention."""

    start = block.starting_balance
    end = block.ending_totals.ending_balance
    if account_type is AccountType.CREDIT:
        start, end = -start, -end
    elif account_type is None:
        start, end = DualAmount.zero(), DualAmount.zero()
    return AccountInfo(start_balance=start, end_balance=end, account_currency=block.account_currency)


__all__ = [
    "AccountType",
    "Simulation",
    "ValidatedAccount",
    "infer_account_type",
    "signed_account_info",
    "simulate",
    "validate_account",
    "validate_accounts",
]
