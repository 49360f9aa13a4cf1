from datetime import datetime
from decimal import Decimal

import pandas as pd
import pytest

from ims_interchange.export import write_export
from ims_interchange.export.general_ledger import (
    COLUMNS,
    GeneralLedgerEncoder,
    LedgerRow,
    fiscal_period,
    fiscal_year,
    mop_suspense_code,
    to_dataframe,
)
from ims_interchange.models import ExportContext, ExportFormat, NormalizedTransaction

MARCH_10 = datetime(2025, 3, 10, 9, 0)
MARCH_11 = datetime(2025, 3, 11, 6, 0)
MARCH_12 = datetime(2025, 3, 12, 16, 45)


@pytest.fixture
def transactions() -> list[NormalizedTransaction]:
    return [
        NormalizedTransaction(
            fund_code="10",
            account_reference="ACC001",
            mop_code="1",
            amount=Decimal("120.00"),
            vat_amount=Decimal("20.00"),
            psp_reference="PYD-1",
            transaction_date=MARCH_10,
            entry_date=MARCH_11,
        ),
        NormalizedTransaction(
            fund_code="9",
            account_reference="GG61234567 ",
            mop_code="1",
            amount=Decimal("30.00"),
            psp_reference="PIP-2",
            transaction_date=MARCH_10.replace(hour=15),
            entry_date=MARCH_11,
        ),
        NormalizedTransaction(
            fund_code="9",
            account_reference="GG62222222",
            mop_code="22",
            amount=Decimal("15.00"),
            psp_reference="X-3",
            transaction_date=MARCH_10,
            entry_date=MARCH_11,
        ),
        NormalizedTransaction(
            fund_code="10",
            account_reference="UNKNOWN",
            mop_code="12",
            amount=Decimal("5.00"),
            psp_reference="PYD-4",
            transaction_date=MARCH_12,
            entry_date=MARCH_12,
        ),
        # not flagged for the ledger
        NormalizedTransaction(
            fund_code="2",
            account_reference="411926C",
            mop_code="1",
            amount=Decimal("99.00"),
            transaction_date=MARCH_10,
            entry_date=MARCH_11,
        ),
    ]


@pytest.mark.parametrize(
    "month, year, period",
    [(1, 2025, 10), (3, 2025, 12), (4, 2026, 1), (12, 2026, 9)],
)
def test_fiscal_year_and_period(month, year, period):
    run_at = datetime(2025, month, 1)
    assert fiscal_year(run_at) == year
    assert fiscal_period(run_at) == period


def test_mop_suspense_code():
    assert mop_suspense_code("1") == "X701/L9820"
    assert mop_suspense_code("12") == "X712/L9820"
    assert mop_suspense_code("123") == "X7123/L9820"


def test_ledger_sections_in_order(transactions, export_ctx):
    rows = GeneralLedgerEncoder().render(transactions, export_ctx)

    assert [(r.code, r.amount) for r in rows] == [
        # net credits
        ("R200/L5555", Decimal("-100.00")),
        ("P100/L1234", Decimal("-30.00")),
        ("P100/L1234", Decimal("-15.00")),
        ("", Decimal("-5.00")),
        # VAT
        ("Z840/L0013", Decimal("-20.00")),
        # bank credits per (date, MOP), MOP 22 left out
        ("Z001/L0030", Decimal("-150.00")),
        ("Z001/L0030", Decimal("-5.00")),
        # gross debits
        ("Z001/L0030", Decimal("120.00")),
        ("Z001/L0030", Decimal("30.00")),
        ("Z001/L0030", Decimal("15.00")),
        ("Z001/L0030", Decimal("5.00")),
        # MOP suspense debits
        ("X701/L9820", Decimal("150.00")),
        ("X712/L9820", Decimal("5.00")),
    ]
    assert {(r.year, r.period) for r in rows} == {(2025, 12)}


def test_ledger_row_details(transactions, export_ctx):
    rows = GeneralLedgerEncoder().render(transactions, export_ctx)

    first = rows[0]
    assert first == LedgerRow(
        year=2025,
        period=12,
        date="10/03/2025",
        code="R200/L5555",
        amount=Decimal("-100.00"),
        reference="ACC001",
        analysis="Income",
        narrative=(
            "PayRef:PYD-1; FundCode:10; MOP:1 Kiosk(1); TrDate:10/03/2025; PostDate:11/03/2025; "
        ),
    )
    assert rows[1].reference == "GG61234567"
    assert rows[1].analysis == "Parking Fines"
    assert rows[3].narrative == (
        "PayRef:PYD-4; FundCode:10; MOP:12 Post Office(12); TrDate:12/03/2025; "
        "PostDate:12/03/2025; "
    )

    bank = rows[5]
    assert bank.date == "14/03/2025"
    assert bank.reference == ""
    assert bank.analysis == ""
    assert bank.narrative == "MOP: (1); TrDate:10/03/2025"
    assert rows[12].narrative == "MOP: (12); TrDate:12/03/2025"


def test_ledger_balances(transactions, export_ctx):
    rows = GeneralLedgerEncoder().render(transactions, export_ctx)
    assert sum(r.amount for r in rows) == 0


def test_ledger_balances_per_transaction_sections(export_ctx):
    txs = [
        NormalizedTransaction(
            fund_code="10",
            account_reference="ACC001",
            mop_code="19",
            amount=Decimal("-12.34"),
            vat_amount=Decimal("-2.06"),
            transaction_date=MARCH_10,
            entry_date=MARCH_10,
        )
    ]
    rows = GeneralLedgerEncoder().render(txs, export_ctx)

    # MOP 19 is not grouped, so only the three per-transaction rows remain.
    assert [r.code for r in rows] == ["R200/L5555", "Z840/L0013", "Z001/L0030"]
    assert sum(r.amount for r in rows) == 0


def test_ledger_without_lookups_selects_nothing(transactions):
    ctx = ExportContext(run_at=datetime(2025, 3, 14))
    assert GeneralLedgerEncoder().render(transactions, ctx) == []


def test_to_dataframe_columns(transactions, export_ctx):
    df = to_dataframe(GeneralLedgerEncoder().render(transactions, export_ctx))
    assert list(df.columns) == list(COLUMNS)
    assert list(COLUMNS) == [
        "Year", "Period", "Date", "Code", "Amount", "Reference", "Analysis", "Narrative"
    ]  # fmt: skip
    assert len(df) == 13
    assert df["Amount"].iloc[0] == pytest.approx(-100.0)


def test_write_workbook(tmp_path, transactions, export_ctx):
    path = write_export(ExportFormat.GENERAL_LEDGER, transactions, export_ctx, tmp_path)

    assert path.name == "GLINC14-03-2025-09-26-53.xlsx"
    df = pd.read_excel(path, sheet_name="Sheet1", dtype={"Code": str, "Date": str})
    assert list(df.columns) == list(COLUMNS)
    assert len(df) == 13
    assert df["Amount"].sum() == pytest.approx(0.0)
    assert df["Code"].iloc[5] == "Z001/L0030"
