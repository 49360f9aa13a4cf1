"""Housing benefit overpayment recovery file (``PAYMENTS.dat``).

Fixed width, no header::

    4sp icm-ref(12) 8sp ddMMyy pence(11) credit(1) 7sp account(11) 36sp

The credit indicator is ``Y`` for refunds (negative amounts), otherwise a
space; the amount itself is always written unsigned.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .formatting import filler, fit, format_date, is_blank, minor_units

FUND_CODE = "6"
BLANK_ACCOUNT = "00000000"
ICM_REF_WIDTH = 12
ACCOUNT_WIDTH = 11
AMOUNT_WIDTH = 11


@dataclass(frozen=True, slots=True)
class HousingBenefitOverpaymentRow:
    icm_ref: str
    trans_date: str
    credit_indicator: str
    amount: str
    account_number: str


def account_number(account_reference: str | None) -> str:
    if is_blank(account_reference):
        return BLANK_ACCOUNT
    return account_reference.strip().rjust(ACCOUNT_WIDTH)


def credit_indicator(amount: Decimal | None) -> str:
    return "Y" if amount is not None and amount < 0 else " "


class HousingBenefitOverpaymentsEncoder(TextEncoder[HousingBenefitOverpaymentRow]):
    export_format = ExportFormat.HOUSING_BENEFIT_OVERPAYMENTS

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        return tx.fund_code == FUND_CODE

    def to_row(
        self, tx: NormalizedTransaction, ctx: ExportContext
    ) -> HousingBenefitOverpaymentRow:
        return HousingBenefitOverpaymentRow(
            icm_ref=fit(tx.psp_reference, ICM_REF_WIDTH),
            trans_date=format_date(tx.transaction_date, "%d%m%y"),
            credit_indicator=credit_indicator(tx.amount),
            amount=minor_units(tx.amount, AMOUNT_WIDTH),
            account_number=account_number(tx.account_reference),
        )

    def serialize(self, row: HousingBenefitOverpaymentRow) -> str:
        return (
            f"{filler(4)}{row.icm_ref}{filler(8)}{row.trans_date}{row.amount}"
            f"{row.credit_indicator}{filler(7)}{row.account_number}{filler(36)}"
        )


__all__ = ["FUND_CODE", "HousingBenefitOverpaymentRow", "HousingBenefitOverpaymentsEncoder"]
