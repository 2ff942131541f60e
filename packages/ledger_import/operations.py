"""Ledger-level operations: merging legs, ordering and the per-date invariant.

Each operation returns a new :class:`~ledger_import.models.Ledger` (or raises);
the input ledger is left untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from datetime import date
from decimal import Decimal
from typing import TypeVar

from .errors import UnbalancedLedgerError
from .logging_setup import get_logger
from .models import Ledger, Posting, Transaction

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def _group_by(
    items: Iterable[T],
    key_fn: Callable[[T], K],
    values_fn: Callable[[T], Iterable[V]],
) -> dict[K, list[V]]:
    """Group values by key, preserving first-seen key order and value order."""

    grouped: dict[K, list[V]] = {}
    for item in items:
        grouped.setdefault(key_fn(item), []).extend(values_fn(item))
    return grouped


def _transactions_from_postings(
    posted: date, description: str, postings: list[Posting]
) -> list[Transaction]:
    """Pair up postings with opposite ledger-currency amounts.

    A pair is merged only when the amount and its negation each occur exactly
    once; every other posting becomes its own single-posting transaction.
    """

    by_amount: dict[Decimal, list[Posting]] = _group_by(
        postings, lambda p: p.amount.in_ledger_currency, lambda p: (p,)
    )

    result: list[Transaction] = []
    while by_amount:
        amount = next(iter(by_amount))
        same = by_amount.pop(amount)
        opposite = by_amount.pop(-amount, [])
        if len(same) == 1 and len(opposite) == 1:
            result.append(Transaction(posted, description, (same[0], opposite[0])))
        else:
            result.extend(Transaction(posted, description, (p,)) for p in same + opposite)
    return result


def merge_transactions(ledger: Ledger) -> Ledger:
    """Merge single-entry legs sharing date, description and opposite amounts.

    Transactions are grouped by ``(date, description)``; within a group the
    postings are bucketed by signed ledger-currency amount and an ``a`` /
    ``-a`` pair is merged only when both buckets hold exactly one posting.
    Ambiguous groups are left as individual transactions.
    """

    grouped = _group_by(
        ledger.transactions,
        lambda t: (t.date, t.description),
        lambda t: t.postings,
    )
    merged = [
        txn
        for (posted, description), postings in grouped.items()
        for txn in _transactions_from_postings(posted, description, postings)
    ]
    n_pairs = sum(1 for t in merged if len(t.postings) == 2)
    logger.info(
        "Merged %d posting pairs; %d transactions left with a single posting",
        n_pairs,
        sum(1 for t in merged if len(t.postings) == 1),
    )
    return ledger.with_transactions(merged)


def sort_transactions_by_date(ledger: Ledger) -> Ledger:
    """Stable sort by date; same-date transactions keep their relative order."""

    return ledger.with_transactions(sorted(ledger.transactions, key=lambda t: t.date))


def check_balanced_per_date(ledger: Ledger) -> None:
    """Assert that postings on every calendar date sum to zero in ledger currency.

    Raises
    ------
    UnbalancedLedgerError
        For the earliest date whose postings do not sum to zero.
    """

    by_date = _group_by(ledger.transactions, lambda t: t.date, lambda t: t.postings)
    for posted in sorted(by_date):
        postings = by_date[posted]
        total = sum((p.amount.in_ledger_currency for p in postings), Decimal(0))
        if not total.is_zero():
            legs = ", ".join(f"{p.account_name}: {p.amount.in_ledger_currency}" for p in postings)
            raise UnbalancedLedgerError(
                f"Postings on {posted.isoformat()} are not balanced (sum {total}): {legs}",
                date=posted,
                postings=postings,
                total=total,
            )
    logger.debug("All %d dates balance to zero", len(by_date))


__all__ = ["check_balanced_per_date", "merge_transactions", "sort_transactions_by_date"]
