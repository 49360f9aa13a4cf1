import random
import textwrap
from datetime import datetime
from decimal import Decimal

from ims_interchange.ingest import classify_text
from ims_interchange.ingest.adapters import bailiff_csv
from ims_interchange.models import ImportKind

NOW = datetime(2025, 5, 13, 10, 30, 0)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


CSV_TEXT = _dedent(
    """
    01/05/2025,412345,125.50,Council Tax,1234567
    02/05/2025,520396,"1,000.00",NDR,7654321
    03/05/2025,GG61234567,70.00,PCN,
    04/05/2025,0635157,-15.00,Benefit Overpayment,2222222
    05/05/2025,X1,10.00,Garden Waste,3333333
    """
)


def test_bailiff_rows_are_normalized():
    batch = bailiff_csv.to_import_batch(CSV_TEXT, now=NOW, rng=random.Random(1))

    assert batch.import_type_id == 3
    assert batch.notes == "Imported from Bailiff File"
    assert batch.number_of_rows == 5
    assert batch.excluded == 0
    assert batch.errors == ()

    first = batch.rows[0]
    assert first.reference == "412345"
    assert first.account_reference == "412345"
    assert first.fund_code == "2"
    assert first.mop_code == "20"
    assert first.office_code == "S"
    assert first.amount == Decimal("125.50")
    assert first.vat_code == "3"
    assert first.vat_rate == 0
    assert first.vat_amount == 0
    assert first.transaction_date == datetime(2025, 5, 1)
    assert first.entry_date == NOW
    assert first.psp_reference == "BLF-250513-1"
    assert first.narrative == "1234567 (Liability order number)"

    assert [r.fund_code for r in batch.rows] == ["2", "5", "9", "6", ""]
    assert batch.rows[1].amount == Decimal("1000.00")
    assert batch.rows[2].narrative == " (Liability order number)"
    assert batch.rows[3].amount == Decimal("-15.00")
    assert [r.psp_reference for r in batch.rows][-1] == "BLF-250513-5"


def test_unknown_fund_name_defaults_vat_code():
    batch = bailiff_csv.to_import_batch(CSV_TEXT, now=NOW, rng=random.Random(1))
    unknown = batch.rows[4]
    assert unknown.fund_code == ""
    assert unknown.vat_code == "1"
    assert unknown.vat_rate == 0


def test_internal_references_are_random_alphanumeric():
    batch = bailiff_csv.to_import_batch(CSV_TEXT, now=NOW, rng=random.Random(1))
    refs = [r.internal_reference for r in batch.rows]
    assert all(len(r) == 16 and r.isascii() and r.isalnum() for r in refs)
    assert len(set(refs)) == len(refs)

    again = bailiff_csv.to_import_batch(CSV_TEXT, now=NOW, rng=random.Random(1))
    assert [r.internal_reference for r in again.rows] == refs


def test_unparseable_rows_are_excluded_and_counted(caplog):
    text = _dedent(
        """
        01/05/2025,412345,125.50,Council Tax,1234567
        31/02/2025,412346,10.00,Council Tax,1234567
        01/05/2025,412347,ten pounds,Council Tax,1234567

        02/05/2025,412348,5.00,Council Tax,1234567
        """
    )
    batch = bailiff_csv.to_import_batch(text, now=NOW, rng=random.Random(1))

    assert [r.account_reference for r in batch.rows] == ["412345", "412348"]
    assert batch.excluded == 2
    assert len(batch.errors) == 2
    assert batch.errors[0].startswith("bailiff row 2:")
    assert "ten pounds" in batch.errors[1]
    # Row numbers (and so PSP references) count records, not blank lines.
    assert batch.rows[1].psp_reference == "BLF-250513-4"


def test_dispatch_by_kind():
    batch = classify_text(ImportKind.BAILIFF, CSV_TEXT, now=NOW, rng=random.Random(1))
    assert batch.import_type_id == 3
    assert classify_text("bailiff", CSV_TEXT, now=NOW).number_of_rows == 5
