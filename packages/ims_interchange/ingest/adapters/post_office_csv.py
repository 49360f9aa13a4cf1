"""Adapter for post-office payment network ("PIP") settlement files.

File shape
----------
- The first line is a file header and the last two lines are trailer lines;
  all three are skipped before CSV parsing.
- Records are headerless, 32 positional columns (see ``COLUMNS``).
- Dates use ``ddMMyyyy HHmmss``.

Unlike the other sources, the fund code and account reference are not named
in the file: both are decoded from the payment-network reference number by
:func:`ims_interchange.reference_decoder.decode`. Records the network marks
as duplicates or errors are not imported; they are counted on the batch.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ...logging_setup import get_logger
from ...models import ImportBatch, NormalizedTransaction
from ...reference_decoder import decode
from ..common import (
    OFFICE_CODE,
    RowError,
    SourceRow,
    build_batch,
    generate_internal_reference,
    parse_amount,
    parse_date,
    psp_reference,
    read_rows,
)

IMPORT_TYPE_ID = 1
NOTES = "Imported from PIPostOffice File"
MOP_CODE = "12"
PSP_TAG = "PIP"
VAT_CODE = "2"

EXCLUDED_STATUSES = frozenset({"DUPLICATE", "ERROR"})

COLUMNS: tuple[str, ...] = (
    "TransactionStatus",
    "TransactionType",
    "TransactionDate",
    "ContinuousAuditNumber",
    "GroupNumber",
    "ClientId",
    "LineId",
    "ReferenceNumber",
    "Amount",
    "VATAmount",
    "PartialBankAccount",
    "BankSortCode",
    "BACSReference",
    "PartialCardNumber",
    "PaymentDescription",
    "CardHolderName",
    "PspReference",
    "PaymentSource",
    "PaymentMethod",
    "FundCode",
    "CRN",
    "External Transaction Reference",
    "ExternalTerminalReference",
    "ExternalPayment LocationCode",
    "LocationName",
    "LocationAddress1",
    "LocationAddress2",
    "LocationAddress3",
    "LocationAddress4",
    "Postcode",
    "Reference2",
    "Reference3",
)
_COL = {name: i for i, name in enumerate(COLUMNS)}

_logger = get_logger("ims_interchange.ingest.post_office")


@dataclass(frozen=True, slots=True)
class PostOfficeRecord:
    """The subset of a settlement record the import uses."""

    transaction_status: str
    transaction_type: str
    transaction_date: datetime
    continuous_audit_number: int
    reference_number: str
    amount: Decimal
    psp_reference: str
    payment_source: str
    payment_method: str


def strip_envelope(text: str) -> str:
    """Drop the header line and the two trailer lines."""

    lines = text.replace("\r\n", "\n").split("\n")
    return "\n".join(lines[1:-2])


def parse_record(row: SourceRow) -> PostOfficeRecord:
    def col(name: str) -> str:
        return row.get(_COL[name])

    raw_can = col("ContinuousAuditNumber")
    try:
        can = int(raw_can)
    except ValueError as exc:
        raise RowError(f"invalid continuous audit number: {raw_can!r}") from exc

    return PostOfficeRecord(
        transaction_status=col("TransactionStatus"),
        transaction_type=col("TransactionType"),
        transaction_date=parse_date(col("TransactionDate"), "%d%m%Y %H%M%S"),
        continuous_audit_number=can,
        reference_number=col("ReferenceNumber"),
        amount=parse_amount(col("Amount")),
        psp_reference=col("PspReference"),
        payment_source=col("PaymentSource"),
        payment_method=col("PaymentMethod"),
    )


def is_excluded(row: SourceRow) -> bool:
    """Return ``True`` for records the network flags as duplicates or errors."""

    return row.get(_COL["TransactionStatus"]).upper() in EXCLUDED_STATUSES


def convert(
    record: PostOfficeRecord,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> NormalizedTransaction:
    now = now or datetime.now()
    classification = decode(record.reference_number)
    return NormalizedTransaction(
        reference=record.reference_number,
        internal_reference=record.psp_reference or generate_internal_reference(rng),
        psp_reference=psp_reference(
            PSP_TAG, now, record.continuous_audit_number, date_format="%Y%m%d"
        ),
        office_code=OFFICE_CODE,
        entry_date=now,
        transaction_date=record.transaction_date,
        account_reference=classification.account_reference,
        fund_code=classification.fund_code,
        mop_code=MOP_CODE,
        amount=record.amount,
        vat_code=VAT_CODE,
        vat_rate=Decimal("0"),
        vat_amount=Decimal("0"),
        narrative=f"{record.payment_source} - {record.payment_method}",
    )


def to_import_batch(
    text: str,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> ImportBatch:
    """Classify a settlement file, excluding flagged records."""

    now = now or datetime.now()
    kept: list[SourceRow] = []
    flagged: list[str] = []
    for row in read_rows(strip_envelope(text)):
        if is_excluded(row):
            status = row.get(_COL["TransactionStatus"])
            _logger.debug("Skipping post office row %d with status %s", row.number, status)
            flagged.append(f"post office row {row.number}: status {status}")
            continue
        kept.append(row)

    return build_batch(
        kept,
        lambda row: convert(parse_record(row), now=now, rng=rng),
        import_type_id=IMPORT_TYPE_ID,
        notes=NOTES,
        source="post office",
        excluded=len(flagged),
        errors=flagged,
    )


__all__ = [
    "IMPORT_TYPE_ID",
    "COLUMNS",
    "EXCLUDED_STATUSES",
    "PostOfficeRecord",
    "strip_envelope",
    "parse_record",
    "is_excluded",
    "convert",
    "to_import_batch",
]
