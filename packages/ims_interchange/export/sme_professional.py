"""SME Professional lettings file (``GBCLettings_<dd-MMM-yy>.csv``).

Rent accounts in the 97000000-97999999 range, one comma-separated line per
payment: ``dd-MMM-yy,amount,1,GBP,account``.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import fixed_2dp, format_date, is_blank

FUND_CODE = "8"
ACCOUNT_PREFIX = "97"
BLANK_ACCOUNT = "000000000"
CURRENCY = "GBP"


@dataclass(frozen=True, slots=True)
class SMEProfessionalRow:
    trans_date: str
    amount: str
    account_number: str


class SMEProfessionalEncoder(TextEncoder[SMEProfessionalRow]):
    export_format = ExportFormat.SME_PROFESSIONAL

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return (
            tx.fund_code == FUND_CODE
            and not is_blank(tx.account_reference)
            and tx.account_reference.startswith(ACCOUNT_PREFIX)
        )

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> SMEProfessionalRow:
        return SMEProfessionalRow(
            trans_date=format_date(tx.transaction_date, "%d-%b-%y"),
            amount="0.00" if tx.amount is None else fixed_2dp(tx.amount),
            account_number=(
                BLANK_ACCOUNT if is_blank(tx.account_reference) else tx.account_reference.strip()
            ),
        )

    def serialize(self, row: SMEProfessionalRow) -> str:
        return f"{row.trans_date},{row.amount},1,{CURRENCY},{row.account_number}"


__all__ = ["FUND_CODE", "ACCOUNT_PREFIX", "SMEProfessionalRow", "SMEProfessionalEncoder"]
