"""Housing rents payment file (``CASH1.dat``).

Fixed width, no header::

    account(8) sub-account(1) dd.MM.yyyy mop(4) week(2) receipt(8) pence(10)

Rent accounts numbered 97xxxxxx belong to the SME Professional lettings
system and are left out of this file (see :mod:`.sme_professional`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import fit, format_date, is_blank, minor_units

FUND_CODE = "8"
SME_PROFESSIONAL_PREFIX = "97"

MOP_CODES: Mapping[str, str] = MappingProxyType(
    {
        "51": "SA",
        "46": "IP",
        "47": "IP",
        "1": "KS",
        "5": "ME",
        "22": "TC",
        "48": "CO",
        "4": "CA",
        "19": "IB",
        "12": "PP",
    }
)

BLANK_MOP = "00  "
ACCOUNT_WIDTH = 8
MOP_WIDTH = 4
AMOUNT_WIDTH = 10
SUB_ACCOUNT = "0"
WEEK_NUMBER = "00"


@dataclass(frozen=True, slots=True)
class RentRow:
    account_number: str
    sub_account_number: str
    trans_date: str
    method_of_payment: str
    week_number: str
    receipt_number: str
    amount: str


def account_number(account_reference: str | None) -> str:
    return fit(account_reference, ACCOUNT_WIDTH, fill="0")


def method_of_payment(mop_code: str | None) -> str:
    if is_blank(mop_code):
        return BLANK_MOP
    # Unmapped codes pass through; longer ones are not cut.
    return MOP_CODES.get(mop_code, mop_code).ljust(MOP_WIDTH)


class HousingRentsEncoder(TextEncoder[RentRow]):
    export_format = ExportFormat.HOUSING_RENTS

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return (
            tx.fund_code == FUND_CODE
            and not is_blank(tx.account_reference)
            and not tx.account_reference.startswith(SME_PROFESSIONAL_PREFIX)
        )

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> RentRow:
        account = account_number(tx.account_reference)
        return RentRow(
            account_number=account,
            sub_account_number=SUB_ACCOUNT,
            trans_date=format_date(tx.transaction_date, "%d.%m.%Y"),
            method_of_payment=method_of_payment(tx.mop_code),
            week_number=WEEK_NUMBER,
            receipt_number=account,
            amount=minor_units(tx.amount, AMOUNT_WIDTH),
        )

    def serialize(self, row: RentRow) -> str:
        return (
            f"{row.account_number}{row.sub_account_number}{row.trans_date}"
            f"{row.method_of_payment}{row.week_number}{row.receipt_number}{row.amount}"
        )


__all__ = ["FUND_CODE", "MOP_CODES", "RentRow", "HousingRentsEncoder"]
