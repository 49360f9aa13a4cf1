"""General ledger income journal (``GLINC<dd-MM-yyyy-HH-mm-ss>.xlsx``).

Every transaction from a fund flagged ``ExportToLedger`` is posted as a
balanced double entry. Rows are emitted in five sections, always in this
order:

1. net credit per transaction, ``-(amount - vat)``, against the fund's
   ledger code;
2. VAT credit per transaction that carries VAT, against ``Z840/L0013``;
3. one bank credit per (transaction date, method of payment) group,
   ``-sum(amount)``, against ``Z001/L0030``;
4. gross debit per transaction against ``Z001/L0030``;
5. one debit per group from section 3 against the method-of-payment
   suspense code ``X7<mop>/L9820``.

Sections 1, 2 and 4 always net to zero. Groups leave out methods of payment
19 and 22, which are settled outside the ledger. The journal is written as a
single sheet workbook through pandas and openpyxl.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pandas as pd

from ..logging_setup import get_logger
from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .formatting import compose_narrative, format_date

EXPORT_FLAG = "ExportToLedger"
USE_LEDGER_CODE_FLAG = "UseGeneralLedgerCode"
LEDGER_CODE_KEY = "GeneralLedgerCode"
ACCOUNT_HOLDER_FUND_CODE = "10"

VAT_CODE = "Z840/L0013"
BANK_CODE = "Z001/L0030"
UNGROUPED_MOP_CODES = frozenset({"19", "22"})

SHEET_NAME = "Sheet1"
DATE_FORMAT = "%d/%m/%Y"

_logger = get_logger("ims_interchange.export.general_ledger")


@dataclass(frozen=True, slots=True)
class LedgerRow:
    year: int
    period: int
    date: str
    code: str
    amount: Decimal
    reference: str
    analysis: str
    narrative: str


COLUMNS: tuple[str, ...] = tuple(f.name.capitalize() for f in fields(LedgerRow))


def fiscal_year(run_at: datetime) -> int:
    """The financial year runs April to March and is named for the year it ends."""

    return run_at.year if run_at.month < 4 else run_at.year + 1


def fiscal_period(run_at: datetime) -> int:
    """April is period 1, March is period 12."""

    return run_at.month + 9 if run_at.month < 4 else run_at.month - 3


def mop_suspense_code(mop_code: str) -> str:
    return f"X70{mop_code}/L9820" if len(mop_code) == 1 else f"X7{mop_code}/L9820"


def _amount(tx: NormalizedTransaction) -> Decimal:
    return tx.amount if tx.amount is not None else Decimal(0)


class GeneralLedgerEncoder:
    export_format = ExportFormat.GENERAL_LEDGER

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        fund = ctx.lookups.fund(tx.fund_code)
        return fund is not None and fund.flag(EXPORT_FLAG)

    def select(
        self, transactions: Iterable[NormalizedTransaction], ctx: ExportContext
    ) -> list[NormalizedTransaction]:
        return [tx for tx in transactions if self.accepts(tx, ctx)]

    def ledger_code(self, tx: NormalizedTransaction, ctx: ExportContext) -> str:
        fund = ctx.lookups.fund(tx.fund_code)
        if fund is not None and fund.flag(USE_LEDGER_CODE_FLAG):
            return fund.meta(LEDGER_CODE_KEY) or ""
        if tx.fund_code == ACCOUNT_HOLDER_FUND_CODE:
            holder = ctx.lookups.account_holder(tx.account_reference)
            if holder is not None:
                return holder.user_field1 or ""
        return ""

    def narrative(self, tx: NormalizedTransaction, ctx: ExportContext) -> str:
        mop = ctx.lookups.method_of_payment(tx.mop_code)
        mop_name = mop.name if mop is not None and mop.name else ""
        mop_code = tx.mop_code or ""
        return compose_narrative(
            [
                ("PayRef", tx.psp_reference),
                ("FundCode", tx.fund_code),
                ("MOP", f"{mop_code} {mop_name}({mop_code})"),
                ("TrDate", format_date(tx.transaction_date, DATE_FORMAT)),
                ("PostDate", format_date(tx.entry_date, DATE_FORMAT)),
            ]
        )

    def _row(
        self, tx: NormalizedTransaction, ctx: ExportContext, *, code: str, amount: Decimal
    ) -> LedgerRow:
        fund = ctx.lookups.fund(tx.fund_code)
        return LedgerRow(
            year=fiscal_year(ctx.run_at),
            period=fiscal_period(ctx.run_at),
            date=format_date(tx.transaction_date, DATE_FORMAT),
            code=code,
            amount=amount,
            reference=(tx.account_reference or "").strip(),
            analysis=(fund.fund_name or "") if fund is not None else "",
            narrative=self.narrative(tx, ctx),
        )

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> LedgerRow:
        """The net credit for ``tx`` (first section of the journal)."""

        return self._row(
            tx, ctx, code=self.ledger_code(tx, ctx), amount=-(_amount(tx) - tx.vat_amount)
        )

    def _groups(
        self, transactions: list[NormalizedTransaction]
    ) -> dict[tuple[date, str | None], Decimal]:
        # dicts keep first-seen order, which fixes the order of the grouped rows
        totals: dict[tuple[date, str | None], Decimal] = {}
        for tx in transactions:
            if tx.mop_code in UNGROUPED_MOP_CODES:
                continue
            key = (tx.transaction_date.date(), tx.mop_code)
            totals[key] = totals.get(key, Decimal(0)) + _amount(tx)
        return totals

    def _group_row(
        self,
        ctx: ExportContext,
        key: tuple[date, str | None],
        *,
        code: str,
        amount: Decimal,
    ) -> LedgerRow:
        tr_date, mop_code = key
        return LedgerRow(
            year=fiscal_year(ctx.run_at),
            period=fiscal_period(ctx.run_at),
            date=format_date(ctx.run_at, DATE_FORMAT),
            code=code,
            amount=amount,
            reference="",
            analysis="",
            narrative=f"MOP: ({mop_code or ''}); TrDate:{tr_date:%d/%m/%Y}",
        )

    def _iter_rows(
        self, transactions: list[NormalizedTransaction], ctx: ExportContext
    ) -> Iterator[LedgerRow]:
        for tx in transactions:
            yield self.to_row(tx, ctx)
        for tx in transactions:
            if tx.vat_amount != 0:
                yield self._row(tx, ctx, code=VAT_CODE, amount=-tx.vat_amount)
        groups = self._groups(transactions)
        for key, total in groups.items():
            yield self._group_row(ctx, key, code=BANK_CODE, amount=-total)
        for tx in transactions:
            yield self._row(tx, ctx, code=BANK_CODE, amount=_amount(tx))
        for key, total in groups.items():
            yield self._group_row(ctx, key, code=mop_suspense_code(key[1] or ""), amount=total)

    def serialize(self, row: LedgerRow) -> dict[str, object]:
        """The row as a worksheet record keyed by column heading."""

        return dict(zip(COLUMNS, asdict(row).values()))

    def render(
        self, transactions: Iterable[NormalizedTransaction], ctx: ExportContext
    ) -> list[LedgerRow]:
        """Return the full journal for ``transactions`` in posting order."""

        selected = self.select(transactions, ctx)
        rows = list(self._iter_rows(selected, ctx))
        _logger.info(
            "%s: %d transaction(s), %d ledger row(s)", self.export_format, len(selected), len(rows)
        )
        return rows


def to_dataframe(rows: Iterable[LedgerRow]) -> pd.DataFrame:
    """Tabulate ``rows`` with the journal's column headings."""

    encoder = GeneralLedgerEncoder()
    records = [encoder.serialize(row) for row in rows]
    df = pd.DataFrame.from_records(records, columns=list(COLUMNS))
    # Excel cells hold doubles.
    df["Amount"] = df["Amount"].astype(float)
    return df


def write_workbook(rows: Iterable[LedgerRow], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = to_dataframe(rows)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    _logger.info("Ledger workbook saved: %s (%d row(s))", path, len(df))
    return path


__all__ = [
    "COLUMNS",
    "LedgerRow",
    "GeneralLedgerEncoder",
    "fiscal_year",
    "fiscal_period",
    "mop_suspense_code",
    "to_dataframe",
    "write_workbook",
]
