from __future__ import annotations

import io
from datetime import date
from decimal import Decimal

import pytest

from ledger_import import (
    AccountValidationError,
    CrossCurrencyError,
    CurrencyMismatch,
    DualAmount,
    ImportSettings,
    ShapeError,
    TokenizationError,
    UnbalancedLedgerError,
    ValidationFailure,
    import_ledger,
    load_ledger,
    read_export_text,
)
from tests.helpers.exports import GLOBAL_HEADER_ROW, dedent


def test_import_global_export(global_export: str):
    ledger = import_ledger(global_export)

    assert ledger.ledger_name == "Acme Corp"
    assert ledger.ledger_currency == "USD"
    assert ledger.date_range.start_date == date(2021, 1, 1)
    assert ledger.date_range.end_date == date(2021, 1, 31)
    assert ledger.account_names() == ["Cash", "Meals", "Revenue"]

    assert [(t.date, t.description) for t in ledger.transactions] == [
        (date(2021, 1, 5), "Coffee"),
        (date(2021, 1, 10), "Deposit"),
    ]
    coffee, deposit = ledger.transactions
    assert [(p.account_name, p.amount.in_ledger_currency) for p in coffee.postings] == [
        ("Cash", Decimal("-12.34")),
        ("Meals", Decimal("12.34")),
    ]
    assert [(p.account_name, p.amount.in_ledger_currency) for p in deposit.postings] == [
        ("Cash", Decimal("50.00")),
        ("Revenue", Decimal("-50.00")),
    ]
    assert all(t.is_balanced() for t in ledger.transactions)


def test_account_balances_use_debit_normal_signs(global_export: str):
    accounts = import_ledger(global_export).accounts
    assert accounts["Cash"].start_balance == DualAmount.single(Decimal("100.00"))
    assert accounts["Cash"].end_balance == DualAmount.single(Decimal("137.66"))
    assert accounts["Revenue"].end_balance == DualAmount.single(Decimal("-50.00"))
    assert accounts["Meals"].account_currency == "USD"


def test_load_ledger_keeps_one_posting_per_transaction(global_export: str):
    ledger = load_ledger(global_export)
    assert [len(t.postings) for t in ledger.transactions] == [1, 1, 1, 1]
    assert [t.postings[0].account_name for t in ledger.transactions] == [
        "Cash",
        "Cash",
        "Meals",
        "Revenue",
    ]


def test_import_per_account_export(per_account_export: str):
    ledger = import_ledger(per_account_export)
    assert ledger.accounts["Euro Bank"].account_currency == "EUR"
    assert ledger.accounts["Euro Bank"].start_balance == DualAmount(
        Decimal("100.00"), Decimal("90.00")
    )
    (transfer,) = ledger.transactions
    assert [p.amount for p in transfer.postings] == [
        DualAmount(Decimal("10.00"), Decimal("9.00")),
        DualAmount(Decimal("-10.00"), Decimal("-10.00")),
    ]


def test_currency_switch_is_rejected(per_account_export: str):
    text = per_account_export.replace(
        "$110.00,USD,,€9.00,,€99.00,EUR", "$110.00,USD,,£8.00,,£80.00,GBP"
    )
    with pytest.raises(CrossCurrencyError) as excinfo:
        import_ledger(text)
    assert excinfo.value.reason is CurrencyMismatch.ACCOUNT_CURRENCY_CODE


def test_mutated_posting_balance_is_rejected(global_export: str):
    text = global_export.replace("$12.34,$87.66", "$12.34,$87.65")
    with pytest.raises(AccountValidationError) as excinfo:
        import_ledger(text)
    assert excinfo.value.reason is ValidationFailure.POSTING_BALANCE_MISMATCH
    assert excinfo.value.account_name == "Cash"


def test_unbalanced_date_is_rejected(global_export: str):
    # Meals records the coffee a day late; both accounts still reconcile.
    text = global_export.replace(",2021-01-05,Coffee,$12.34", ",2021-01-06,Coffee,$12.34")
    assert load_ledger(text)
    with pytest.raises(UnbalancedLedgerError) as excinfo:
        import_ledger(text)
    assert excinfo.value.date == date(2021, 1, 5)


def test_duplicate_account_is_rejected(global_export: str):
    text = global_export.replace(",Meals,,,,", ",Cash,,,,")
    with pytest.raises(AccountValidationError) as excinfo:
        load_ledger(text)
    assert excinfo.value.reason is ValidationFailure.DUPLICATE_ACCOUNT


def test_blocks_must_be_separated(global_export: str):
    text = global_export.replace('""\n,Meals', ",Meals", 1)
    with pytest.raises(ShapeError) as excinfo:
        load_ledger(text)
    assert excinfo.value.row_shape == "block separator row"


def test_trailing_separator_is_accepted(global_export: str):
    assert len(import_ledger(global_export + '""\n').accounts) == 3


def test_header_only_export_is_an_empty_ledger(global_export: str):
    header = "".join(global_export.splitlines(keepends=True)[:5])
    ledger = import_ledger(header)
    assert ledger.accounts == {}
    assert ledger.transactions == ()


def test_crlf_export(global_export: str):
    ledger = import_ledger(global_export.replace("\n", "\r\n"))
    assert len(ledger.transactions) == 2


def test_tokenization_error_propagates(global_export: str):
    with pytest.raises(TokenizationError):
        import_ledger(global_export.replace(",Coffee,", ',"Coffee"x,', 1))


@pytest.mark.parametrize(
    "source",
    [
        "\ufeffabc",
        "\ufeffabc".encode(),
        io.StringIO("\ufeffabc"),
        io.BytesIO("\ufeffabc".encode()),
    ],
)
def test_read_export_text_strips_byte_order_mark(source):
    assert read_export_text(source) == "abc"


def test_bytes_with_byte_order_mark(global_export: str):
    ledger = import_ledger(("\ufeff" + global_export).encode("utf-8"))
    assert ledger.ledger_name == "Acme Corp"


def test_invalid_utf8_is_not_swallowed():
    with pytest.raises(UnicodeDecodeError):
        read_export_text(b"\xff\xfe\x00")


def test_ledger_currency_from_settings(global_export: str):
    text = global_export.replace("$", "€")
    ledger = import_ledger(text, settings=ImportSettings(ledger_currency="EUR"))
    assert ledger.ledger_currency == "EUR"
    assert ledger.accounts["Cash"].account_currency == "EUR"

    with pytest.raises(CrossCurrencyError):
        import_ledger(text)


def test_ledger_currency_from_environment(global_export: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LEDGER_IMPORT_LEDGER_CURRENCY", "GBP")
    ledger = import_ledger(global_export.replace("$", "£"))
    assert ledger.ledger_currency == "GBP"


def test_two_account_mirror_scenario():
    text = dedent(
        """
        Account Transactions
        Mirror Co
        Date Range: 2021-01-01 to 2021-12-31
        Report Type: Accrual (Paid & Unpaid)
        {header}
        ,Account A,,,,
        Starting Balance,,,,,$123.45
        ,2021-06-01,Transfer,$1.23,,$124.68
        Totals and Ending Balance,,,$1.23,$0.00,$124.68
        Balance Change,,,$1.23,,
        ""
        ,Account B,,,,
        Starting Balance,,,,,$123.45
        ,2021-06-01,Transfer,,$1.23,$124.68
        Totals and Ending Balance,,,$0.00,$1.23,$124.68
        Balance Change,,,$1.23,,
        """
    ).format(header=GLOBAL_HEADER_ROW)

    ledger = import_ledger(text)
    (transfer,) = ledger.transactions
    assert transfer.date == date(2021, 6, 1)
    assert [(p.account_name, p.amount.in_ledger_currency) for p in transfer.postings] == [
        ("Account A", Decimal("1.23")),
        ("Account B", Decimal("-1.23")),
    ]
    assert transfer.is_balanced()
    assert ledger.accounts["Account B"].end_balance == DualAmount.single(Decimal("-124.68"))
