"""Sundry debtors payment file (``SDPAY<dd>.txt``).

Nine comma-separated fields per payment. The fifth field is the transaction
date as ``dd MMM yy`` with a trailing space and the sixth is a single space;
the receiving system reads both positionally.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import fixed_2dp, format_date

FUND_CODE = "7"
FILLER = " "


@dataclass(frozen=True, slots=True)
class SundryDebtorRow:
    icm_ref: str
    method_of_payment: str
    export_date: str
    account_ref1: str
    trans_date: str
    filler: str
    amount: str
    account_ref2: str
    transaction_date: str


class SundryDebtorsEncoder(TextEncoder[SundryDebtorRow]):
    export_format = ExportFormat.SUNDRY_DEBTORS

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return tx.fund_code == FUND_CODE

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> SundryDebtorRow:
        account = (tx.account_reference or "").strip()
        return SundryDebtorRow(
            icm_ref=(tx.psp_reference or "").strip(),
            method_of_payment=tx.mop_code or "",
            export_date=format_date(ctx.run_at, "%d/%m/%Y"),
            account_ref1=account,
            trans_date=format_date(tx.transaction_date, "%d %b %y "),
            filler=FILLER,
            amount="0.00" if tx.amount is None else fixed_2dp(tx.amount),
            account_ref2=account,
            transaction_date=format_date(tx.transaction_date, "%d/%m/%Y"),
        )

    def serialize(self, row: SundryDebtorRow) -> str:
        return ",".join(
            (
                row.icm_ref,
                row.method_of_payment,
                row.export_date,
                row.account_ref1,
                row.trans_date,
                row.filler,
                row.amount,
                row.account_ref2,
                row.transaction_date,
            )
        )


__all__ = ["FUND_CODE", "SundryDebtorRow", "SundryDebtorsEncoder"]
