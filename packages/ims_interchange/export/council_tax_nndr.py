"""Council tax and business rates (NNDR) payment file (``IWORLD.pay``).

Fixed width, no delimiter. One header line::

    dd MMM yyyy*HH:mm:ss00002<26 spaces>

then one line per payment::

    account(6) 9sp check(1) 2sp mop amount(14) fund date(11) 20sp
    icm-ref(18) 65sp liability(10)

Bailiff collections carry the liability order number in the narrative; the
first seven characters of such a narrative are written right-aligned in the
last column.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import check_digit_suffix, filler, fit, fixed_2dp, format_date, is_blank

FUND_CODES_FOR_EXPORT = frozenset({"2", "5"})

FUND_CODES: Mapping[str, str] = MappingProxyType({"2": "CT", "5": "NN"})

MOP_CODES: Mapping[str, str] = MappingProxyType(
    {
        "46": "WS",
        "47": "WS",
        "5": "TP",
        "12": "PP",
        "1": "K1",
        "48": "K2",
        "49": "K2",
    }
)

BLANK_MOP = "00  "
BLANK_ACCOUNT = "000000"
BLANK_AMOUNT = "00000000000.00"
ACCOUNT_WIDTH = 6
AMOUNT_WIDTH = 14
ICM_REF_WIDTH = 18
LIABILITY_WIDTH = 10
HEADER_MARKER = "00002"


@dataclass(frozen=True, slots=True)
class CouncilTaxNNDRRow:
    icm_ref: str
    trans_date: str
    amount: str
    account_number: str
    check_digit: str
    method_of_payment: str
    liability_number: str
    fund: str


def account_number(account_reference: str | None) -> str:
    if is_blank(account_reference):
        return BLANK_ACCOUNT
    return fit(account_reference, ACCOUNT_WIDTH, fill="0")


def method_of_payment(mop_code: str | None) -> str:
    if is_blank(mop_code):
        return BLANK_MOP
    return MOP_CODES.get(mop_code, mop_code)


def fund(fund_code: str | None) -> str:
    return FUND_CODES.get(fund_code or "", fund_code or "")


def liability_number(narrative: str | None) -> str:
    if is_blank(narrative):
        return ""
    if "Liability" in narrative:
        return narrative[:7].rjust(LIABILITY_WIDTH)
    return filler(LIABILITY_WIDTH)


class CouncilTaxNNDREncoder(TextEncoder[CouncilTaxNNDRRow]):
    export_format = ExportFormat.COUNCIL_TAX_NNDR

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return tx.fund_code in FUND_CODES_FOR_EXPORT

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> CouncilTaxNNDRRow:
        return CouncilTaxNNDRRow(
            icm_ref=fit(tx.psp_reference, ICM_REF_WIDTH),
            trans_date=format_date(tx.transaction_date, "%d-%b-%Y"),
            amount=(
                BLANK_AMOUNT
                if tx.amount is None
                else fixed_2dp(tx.amount).rjust(AMOUNT_WIDTH, "0")
            ),
            account_number=account_number(tx.account_reference),
            check_digit=check_digit_suffix(tx.account_reference),
            method_of_payment=method_of_payment(tx.mop_code),
            liability_number=liability_number(tx.narrative),
            fund=fund(tx.fund_code),
        )

    def serialize(self, row: CouncilTaxNNDRRow) -> str:
        return (
            f"{row.account_number}{filler(9)}{row.check_digit}{filler(2)}"
            f"{row.method_of_payment}{row.amount}{row.fund}{row.trans_date}{filler(20)}"
            f"{row.icm_ref}{filler(65)}{row.liability_number}"
        )

    def header(self, rows: Sequence[CouncilTaxNNDRRow], ctx: ExportContext) -> list[str]:
        run_at = ctx.run_at
        return [
            f"{format_date(run_at, '%d %b %Y')}*{run_at:%H:%M:%S}{HEADER_MARKER}{filler(26)}"
        ]


__all__ = [
    "FUND_CODES_FOR_EXPORT",
    "FUND_CODES",
    "MOP_CODES",
    "CouncilTaxNNDRRow",
    "CouncilTaxNNDREncoder",
]
