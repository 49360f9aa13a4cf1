"""Adapter for payroll-deduction files (staff paying council debts from salary).

Headerless. Columns, by position:

``0`` transaction date (``dd/MM/yyyy``), ``1`` customer reference,
``2`` amount, ``3`` fund name, ``4`` pay element, ``5`` employee name/number.
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

IMPORT_TYPE_ID = 4
NOTES = "Imported from Payroll Deductions File"
MOP_CODE = "51"
PSP_TAG = "PYD"
DEFAULT_VAT_CODE = "1"

FUND_NAMES: Mapping[str, FundDetails] = MappingProxyType(
    {
        "Council Tax": FundDetails(fund_code="2", vat_code="3"),
        "HB Overpayment": FundDetails(fund_code="6", vat_code="3"),
        "Housing Rents": FundDetails(fund_code="8", vat_code="3"),
        "Income": FundDetails(fund_code="10", vat_code="3"),
    }
)


@dataclass(frozen=True, slots=True)
class PayrollDeductionRecord:
    transaction_date: datetime
    customer_reference: str | None
    amount: Decimal
    fund_name: str | None
    pay_element: str | None
    employee_name_number: str | None
    row_number: int


def parse_record(row: SourceRow) -> PayrollDeductionRecord:
    return PayrollDeductionRecord(
        transaction_date=parse_date(row.get(0), "%d/%m/%Y"),
        customer_reference=row.get(1) or None,
        amount=parse_amount(row.get(2)),
        fund_name=row.get(3) or None,
        pay_element=row.get(4) or None,
        employee_name_number=row.get(5) or None,
        row_number=row.number,
    )


def convert(
    record: PayrollDeductionRecord,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> NormalizedTransaction:
    now = now or datetime.now()
    details = FUND_NAMES.get(record.fund_name or "")
    vat_rate = details.vat_rate if details else Decimal("0")

    # Deductions have no payer-facing reference of their own.
    return NormalizedTransaction(
        reference=None,
        internal_reference=generate_internal_reference(rng),
        psp_reference=psp_reference(PSP_TAG, now, record.row_number, date_format="%y%m%d"),
        office_code=OFFICE_CODE,
        entry_date=now,
        transaction_date=record.transaction_date,
        account_reference=record.customer_reference,
        fund_code=details.fund_code if details else "",
        mop_code=MOP_CODE,
        amount=record.amount,
        vat_code=details.vat_code if details else DEFAULT_VAT_CODE,
        vat_rate=vat_rate,
        vat_amount=vat_amount(record.amount, vat_rate),
        narrative=record.employee_name_number or "",
    )


def to_import_batch(
    text: str,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> ImportBatch:
    now = now or datetime.now()
    return build_batch(
        read_rows(text),
        lambda row: convert(parse_record(row), now=now, rng=rng),
        import_type_id=IMPORT_TYPE_ID,
        notes=NOTES,
        source="payroll deductions",
    )


__all__ = [
    "IMPORT_TYPE_ID",
    "FUND_NAMES",
    "PayrollDeductionRecord",
    "parse_record",
    "convert",
    "to_import_batch",
]
