import random
import textwrap
from datetime import datetime
from decimal import Decimal

from ims_interchange.ingest import classify_text
from ims_interchange.ingest.adapters import payroll_deductions_csv

NOW = datetime(2025, 6, 30, 8, 0, 0)

CSV_TEXT = textwrap.dedent(
    """\
    27/06/2025,412345,25.00,Council Tax,CTAX,SMITH J 004512
    27/06/2025,90014096,100.00,Housing Rents,RENT,JONES A 001122
    27/06/2025,ACC001,12.34,Income,MISC,BROWN K 009988
    27/06/2025,0635157,8.00,HB Overpayment,HBOP,
    27/06/2025,999999,1.00,Parking,PARK,GREEN P 000001
    """
)


def test_payroll_rows_are_normalized():
    batch = payroll_deductions_csv.to_import_batch(CSV_TEXT, now=NOW, rng=random.Random(3))

    assert batch.import_type_id == 4
    assert batch.number_of_rows == 5
    assert batch.excluded == 0

    first = batch.rows[0]
    assert first.reference is None
    assert first.account_reference == "412345"
    assert first.fund_code == "2"
    assert first.mop_code == "51"
    assert first.office_code == "S"
    assert first.amount == Decimal("25.00")
    assert first.vat_code == "3"
    assert first.vat_amount == 0
    assert first.psp_reference == "PYD-250630-1"
    assert first.narrative == "SMITH J 004512"
    assert first.transaction_date == datetime(2025, 6, 27)
    assert first.entry_date == NOW

    assert [r.fund_code for r in batch.rows] == ["2", "8", "10", "6", ""]
    assert batch.rows[3].narrative == ""
    assert batch.rows[4].vat_code == "1"


def test_missing_trailing_columns_are_empty():
    batch = payroll_deductions_csv.to_import_batch(
        "27/06/2025,412345,25.00,Council Tax\n", now=NOW, rng=random.Random(3)
    )
    assert batch.number_of_rows == 1
    assert batch.rows[0].narrative == ""


def test_bad_amount_is_excluded():
    text = "27/06/2025,412345,,Council Tax,CTAX,SMITH J\n27/06/2025,412345,2.00,Council Tax,CTAX,SMITH J\n"
    batch = payroll_deductions_csv.to_import_batch(text, now=NOW, rng=random.Random(3))
    assert batch.number_of_rows == 1
    assert batch.excluded == 1
    assert batch.errors == ("payroll deductions row 1: amount is empty",)


def test_dispatch_by_kind():
    batch = classify_text("payroll_deductions", CSV_TEXT, now=NOW, rng=random.Random(3))
    assert batch.import_type_id == 4
