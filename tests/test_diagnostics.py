from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_import import LedgerImportError, UnbalancedLedgerError, import_ledger
from ledger_import.diagnostics import line_and_column, render_diagnostic
from ledger_import.errors import CellValueError
from ledger_import.tokenizer import Span


def test_line_and_column():
    source = "ab\ncde\nf"
    assert line_and_column(source, 0) == (1, 1)
    assert line_and_column(source, 4) == (2, 2)
    assert line_and_column(source, 7) == (3, 1)


def test_render_points_at_the_cell():
    source = "first line\n,2021-01-05,Coffee,,12.00,$88.00\n"
    offset = source.index("12.00")
    err = CellValueError(
        "Expected an amount in posting row, found '12.00'",
        row_shape="posting row",
        span=Span(offset, 5),
    )
    assert render_diagnostic(err, source).splitlines() == [
        "error: Expected an amount in posting row, found '12.00'",
        " --> line 2, column 21",
        "  |",
        "2 | ,2021-01-05,Coffee,,12.00,$88.00",
        "  |                     ^^^^^",
    ]


def test_render_without_span():
    err = UnbalancedLedgerError("not balanced", date=date(2021, 1, 5), postings=(), total=Decimal(1))
    assert render_diagnostic(err, "whatever") == "error: not balanced"


def test_zero_width_span_gets_one_caret():
    err = LedgerImportError("Unexpected end of input", span=Span(3, 0))
    assert render_diagnostic(err, "abc").splitlines()[-1] == "  |    ^"


def test_rendered_error_from_a_real_import(global_export: str):
    source = global_export.replace("$87.66", "87.66")
    with pytest.raises(LedgerImportError) as excinfo:
        import_ledger(source)
    rendered = render_diagnostic(excinfo.value, source)
    assert rendered.startswith("error: Expected an amount in posting row")
    assert ",2021-01-05,Coffee,,$12.34,87.66" in rendered
    assert rendered.splitlines()[-1].endswith("^^^^^")
