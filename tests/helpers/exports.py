"""Complete example exports shared across tests.

Every account block reconciles and every date balances, so individual tests
can break exactly one thing with ``str.replace``.
"""

from __future__ import annotations

import textwrap


def dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n").rstrip()


GLOBAL_HEADER_ROW = (
    "ACCOUNT NUMBER,DATE,DESCRIPTION,DEBIT (In Business Currency),"
    "CREDIT (In Business Currency),BALANCE (In Business Currency)"
)
PER_ACCOUNT_HEADER_ROW = (
    GLOBAL_HEADER_ROW + ",Business Currency,,DEBIT (In Account Currency),"
    "CREDIT (In Account Currency),BALANCE (In Account Currency),Account Currency"
)

GLOBAL_EXPORT = (
    dedent(
        """
        Account Transactions
        Acme Corp
        Date Range: 2021-01-01 to 2021-01-31
        Report Type: Accrual (Paid & Unpaid)
        {header}
        ,Cash,,,,
        Starting Balance,,,,,$100.00
        ,2021-01-05,Coffee,,$12.34,$87.66
        ,2021-01-10,Deposit,$50.00,,$137.66
        Totals and Ending Balance,,,$50.00,$12.34,$137.66
        Balance Change,,,$37.66,,
        ""
        ,Meals,,,,
        Starting Balance,,,,,$0.00
        ,2021-01-05,Coffee,$12.34,,$12.34
        Totals and Ending Balance,,,$12.34,$0.00,$12.34
        Balance Change,,,$12.34,,
        ""
        ,Revenue,,,,
        Starting Balance,,,,,$0.00
        ,2021-01-10,Deposit,,$50.00,$50.00
        Totals and Ending Balance,,,$0.00,$50.00,$50.00
        Balance Change,,,$50.00,,
        """
    ).format(header=GLOBAL_HEADER_ROW)
    + "\n"
)

PER_ACCOUNT_EXPORT = (
    dedent(
        """
        Account Transactions
        Globex Ltd
        Date Range: 2021-01-01 to 2021-01-31
        Report Type: Accrual (Paid & Unpaid)
        {header}
        ,Euro Bank,,,,,,,,,,
        Starting Balance,,,,,$100.00,USD,,,,€90.00,EUR
        ,2021-01-05,Transfer in,$10.00,,$110.00,USD,,€9.00,,€99.00,EUR
        Totals and Ending Balance,,,$10.00,$0.00,$110.00,USD,,€9.00,€0.00,€99.00,EUR
        Balance Change,,,$10.00,,,USD,,€9.00,,,EUR
        ""
        ,Equity,,,,,,,,,,
        Starting Balance,,,,,$0.00,USD,,,,$0.00,USD
        ,2021-01-05,Transfer in,,$10.00,$10.00,USD,,,$10.00,$10.00,USD
        Totals and Ending Balance,,,$0.00,$10.00,$10.00,USD,,$0.00,$10.00,$10.00,USD
        Balance Change,,,$10.00,,,USD,,$10.00,,,USD
        """
    ).format(header=PER_ACCOUNT_HEADER_ROW)
    + "\n"
)


