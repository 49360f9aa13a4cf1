"""Adapter for enforcement-agent (bailiff) payment files.

The file has no header. Columns, by position:

``0`` transaction date (``dd/MM/yyyy``), ``1`` customer reference,
``2`` amount, ``3`` fund name, ``4`` liability order number.

Each row becomes one :class:`~ims_interchange.models.NormalizedTransaction`
collected by the enforcement agent (method of payment ``20``). The customer
reference doubles as the account reference; the liability order number is
carried in the narrative so the council tax export can recover it.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType

from ...models import ImportBatch, NormalizedTransaction
from ..common import (
    OFFICE_CODE,
    FundDetails,
    SourceRow,
    build_batch,
    generate_internal_reference,
    parse_amount,
    parse_date,
    psp_reference,
    read_rows,
    vat_amount,
)

IMPORT_TYPE_ID = 3
NOTES = "Imported from Bailiff File"
MOP_CODE = "20"
PSP_TAG = "BLF"
DEFAULT_VAT_CODE = "1"

# All streams currently share VAT code 3 at a zero rate; kept per fund so a
# rated stream can be added without touching the conversion.
FUND_NAMES: Mapping[str, FundDetails] = MappingProxyType(
    {
        "Council Tax": FundDetails(fund_code="2", vat_code="3"),
        "NDR": FundDetails(fund_code="5", vat_code="3"),
        "Benefit Overpayment": FundDetails(fund_code="6", vat_code="3"),
        "Sundry Debt": FundDetails(fund_code="7", vat_code="3"),
        "PCN": FundDetails(fund_code="9", vat_code="3"),
    }
)


@dataclass(frozen=True, slots=True)
class BailiffRecord:
    transaction_date: datetime
    customer_reference: str | None
    amount: Decimal
    fund_name: str | None
    liability_order_number: str | None
    row_number: int


def parse_record(row: SourceRow) -> BailiffRecord:
    return BailiffRecord(
        transaction_date=parse_date(row.get(0), "%d/%m/%Y"),
        customer_reference=row.get(1) or None,
        amount=parse_amount(row.get(2)),
        fund_name=row.get(3) or None,
        liability_order_number=row.get(4) or None,
        row_number=row.number,
    )


def convert(
    record: BailiffRecord,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> NormalizedTransaction:
    """Map one bailiff record to a normalized transaction.

    Unknown fund names leave the fund code empty with VAT code ``1`` at a
    zero rate; the row is still imported.
    """

    now = now or datetime.now()
    details = FUND_NAMES.get(record.fund_name or "")
    fund_code = details.fund_code if details else ""
    vat_code = details.vat_code if details else DEFAULT_VAT_CODE
    vat_rate = details.vat_rate if details else Decimal("0")

    return NormalizedTransaction(
        reference=record.customer_reference,
        internal_reference=generate_internal_reference(rng),
        psp_reference=psp_reference(PSP_TAG, now, record.row_number, date_format="%y%m%d"),
        office_code=OFFICE_CODE,
        entry_date=now,
        transaction_date=record.transaction_date,
        account_reference=record.customer_reference,
        fund_code=fund_code,
        mop_code=MOP_CODE,
        amount=record.amount,
        vat_code=vat_code,
        vat_rate=vat_rate,
        vat_amount=vat_amount(record.amount, vat_rate),
        narrative=f"{record.liability_order_number or ''} (Liability order number)",
    )


def to_import_batch(
    text: str,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> ImportBatch:
    """Classify a whole bailiff file."""

    now = now or datetime.now()
    return build_batch(
        read_rows(text),
        lambda row: convert(parse_record(row), now=now, rng=rng),
        import_type_id=IMPORT_TYPE_ID,
        notes=NOTES,
        source="bailiff",
    )


__all__ = [
    "IMPORT_TYPE_ID",
    "FUND_NAMES",
    "BailiffRecord",
    "parse_record",
    "convert",
    "to_import_batch",
]
