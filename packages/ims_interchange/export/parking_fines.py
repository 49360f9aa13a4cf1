"""Parking fine (PCN) payment file (``PCN<ddMMyy>.dat``).

A line-oriented format: every field sits on its own line. The file opens
with a 28-line header and each payment is a 28-line block. Only PCNs whose
serial number starts ``GG6`` are written.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import LINE_TERMINATOR, fixed_2dp, format_date, is_blank

FUND_CODE = "9"
PCN_PREFIX = "GG6"

RUN_NUMBER_EPOCH = datetime(2015, 1, 1)
BATCH_NUMBER = "0001"
ZERO_AMOUNT = "000000.00"
BAILIFF_MOP_CODES = frozenset({"19", "20"})
BAILIFF_PAYMENT_METHOD = "BAI"

HEADER_FILLER_LINES = 23
RECORD_FILLER_LINES = 14


@dataclass(frozen=True, slots=True)
class ParkingFineRow:
    pcn_serial_number: str
    receipt_date: str
    receipt_time: str
    receipt_number: str
    payment_method: str
    fine_paid_amount: str
    fine_paid_amount_value: Decimal
    run_number: str


def run_number(run_at: datetime) -> str:
    """Days since 1 January 2015, zero-filled to six digits."""

    return str((run_at.replace(tzinfo=None) - RUN_NUMBER_EPOCH).days).zfill(6)


def fine_amount(amount: Decimal) -> str:
    return fixed_2dp(amount).rjust(9, "0")


def payment_method(mop_code: str | None) -> str:
    if mop_code in BAILIFF_MOP_CODES:
        return BAILIFF_PAYMENT_METHOD
    return "" if is_blank(mop_code) else mop_code


class ParkingFinesEncoder(TextEncoder[ParkingFineRow]):
    export_format = ExportFormat.PARKING_FINES

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return (
            tx.fund_code == FUND_CODE
            and tx.account_reference is not None
            and tx.account_reference.startswith(PCN_PREFIX)
        )

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> ParkingFineRow:
        value = tx.amount if tx.amount is not None else Decimal(0)
        return ParkingFineRow(
            pcn_serial_number=tx.account_reference,
            receipt_date=format_date(tx.transaction_date, "%d/%m/%y"),
            receipt_time=format_date(tx.transaction_date, "%H:%M"),
            receipt_number=tx.psp_reference or "",
            payment_method=payment_method(tx.mop_code),
            fine_paid_amount=fine_amount(value),
            fine_paid_amount_value=value,
            run_number=run_number(ctx.run_at),
        )

    def serialize(self, row: ParkingFineRow) -> str:
        lines = [
            row.run_number,
            BATCH_NUMBER,
            row.pcn_serial_number,
            row.fine_paid_amount,
            row.receipt_date,
            row.receipt_time,
            row.receipt_number,
            *([""] * RECORD_FILLER_LINES),
            row.payment_method,
            row.fine_paid_amount,
            *([ZERO_AMOUNT] * 4),
            row.receipt_date,
        ]
        return LINE_TERMINATOR.join(lines)

    def header(self, rows: Sequence[ParkingFineRow], ctx: ExportContext) -> list[str]:
        total = sum((r.fine_paid_amount_value for r in rows), Decimal(0))
        return [
            run_number(ctx.run_at),
            BATCH_NUMBER,
            str(len(rows)).zfill(4),
            fine_amount(total),
            *([""] * HEADER_FILLER_LINES),
            format_date(ctx.run_at, "%d/%m/%y"),
        ]


__all__ = ["FUND_CODE", "PCN_PREFIX", "ParkingFineRow", "ParkingFinesEncoder", "run_number"]
