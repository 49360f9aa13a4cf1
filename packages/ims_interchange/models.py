"""Data models and type aliases for ``ims_interchange``.

Two families of types live here:

- Core records (frozen ``dataclass`` types): :class:`DecodedClassification`,
  :class:`NormalizedTransaction`, :class:`ImportBatch` and the per-run
  :class:`ExportContext`. These are produced by the classifiers and consumed
  unchanged by the export encoders.
- Lookup-table DTOs (pydantic models) mirroring the JSON returned by the
  transaction-processing API for funds, methods of payment and account
  holders. They are read-only for the duration of an export run.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# English month abbreviations; downstream files must not depend on the host locale.
MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ImportKind(StrEnum):
    """Inbound source files understood by the classifiers."""

    BAILIFF = "bailiff"
    PAYROLL_DEDUCTIONS = "payroll_deductions"
    POST_OFFICE = "post_office"


class ExportFormat(StrEnum):
    """Downstream systems the export encoders produce files for."""

    COUNCIL_TAX_NNDR = "council_tax_nndr"
    GENERAL_LEDGER = "general_ledger"
    HOUSING_RENTS = "housing_rents"
    HOUSING_BENEFIT_OVERPAYMENTS = "housing_benefit_overpayments"
    SME_PROFESSIONAL = "sme_professional"
    SUNDRY_DEBTORS = "sundry_debtors"
    PARKING_FINES = "parking_fines"

    def default_file_name(self, run_at: datetime) -> str:
        """Return the file name the receiving system expects for a run at ``run_at``."""

        match self:
            case ExportFormat.COUNCIL_TAX_NNDR:
                return "IWORLD.pay"
            case ExportFormat.GENERAL_LEDGER:
                return f"GLINC{run_at:%d-%m-%Y-%H-%M-%S}.xlsx"
            case ExportFormat.HOUSING_RENTS:
                return "CASH1.dat"
            case ExportFormat.HOUSING_BENEFIT_OVERPAYMENTS:
                return "PAYMENTS.dat"
            case ExportFormat.SME_PROFESSIONAL:
                month = MONTH_ABBREVIATIONS[run_at.month - 1]
                return f"GBCLettings_{run_at:%d}-{month}-{run_at:%y}.csv"
            case ExportFormat.SUNDRY_DEBTORS:
                return f"SDPAY{run_at:%d}.txt"
            case ExportFormat.PARKING_FINES:
                return f"PCN{run_at:%d%m%y}.dat"


# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DecodedClassification:
    """Fund code and account reference recovered from a payment-network reference.

    Both fields default to the empty string when no decoding rule matches;
    neither is ever ``None``.
    """

    fund_code: str = ""
    account_reference: str = ""


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A single source-agnostic payment event.

    ``amount`` is signed in major currency units: positive for a payment
    received, negative for a refund or credit. ``vat_amount`` is the VAT
    portion already included in ``amount``. Instances are created once by a
    classifier and never mutated; encoders only read them.
    """

    reference: str | None = None
    internal_reference: str | None = None
    psp_reference: str | None = None
    office_code: str | None = None
    entry_date: datetime | None = None
    transaction_date: datetime | None = None
    account_reference: str | None = None
    fund_code: str | None = None
    mop_code: str | None = None
    amount: Decimal | None = None
    vat_code: str | None = None
    vat_rate: Decimal = Decimal("0")
    vat_amount: Decimal = Decimal("0")
    narrative: str | None = None


@dataclass(frozen=True, slots=True)
class ImportBatch:
    """The result of classifying one inbound file.

    ``rows`` holds the accepted transactions in source order. Rows the source
    marked as duplicates or errors, and rows that could not be parsed, are
    not raised; they are counted in ``excluded`` and described in ``errors``.
    """

    import_type_id: int
    notes: str
    rows: tuple[NormalizedTransaction, ...] = ()
    errors: tuple[str, ...] = ()
    excluded: int = 0

    @property
    def number_of_rows(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Lookup tables (API DTOs)
# ---------------------------------------------------------------------------


class _ApiModel(BaseModel):
    # The API speaks camelCase; tests and callers may use field names.
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class MetadataItem(_ApiModel):
    key: str
    value: str | None = None


class Fund(_ApiModel):
    """A revenue stream, plus its free-form metadata flags."""

    fund_code: str = Field(alias="fundCode")
    fund_name: str | None = Field(default=None, alias="fundName")
    metadata: tuple[MetadataItem, ...] = ()

    def meta(self, key: str) -> str | None:
        """Return the first metadata value stored under ``key`` (or ``None``)."""

        for item in self.metadata:
            if item.key == key:
                return item.value
        return None

    def flag(self, key: str) -> bool:
        """Return ``True`` when metadata ``key`` is present with value ``"True"``."""

        return any(item.key == key and item.value == "True" for item in self.metadata)


class MethodOfPayment(_ApiModel):
    code: str
    name: str | None = None


class AccountHolder(_ApiModel):
    account_reference: str | None = Field(default=None, alias="accountReference")
    user_field1: str | None = Field(default=None, alias="userField1")


class LookupTables(_ApiModel):
    """Reference data fetched once per export run."""

    funds: tuple[Fund, ...] = ()
    methods_of_payment: tuple[MethodOfPayment, ...] = Field(default=(), alias="methodsOfPayment")
    account_holders: tuple[AccountHolder, ...] = Field(default=(), alias="accountHolders")

    def fund(self, fund_code: str | None) -> Fund | None:
        for f in self.funds:
            if f.fund_code == fund_code:
                return f
        return None

    def method_of_payment(self, code: str | None) -> MethodOfPayment | None:
        for m in self.methods_of_payment:
            if m.code == code:
                return m
        return None

    def account_holder(self, account_reference: str | None) -> AccountHolder | None:
        for holder in self.account_holders:
            if holder.account_reference == account_reference:
                return holder
        return None


@dataclass(frozen=True, slots=True)
class ExportContext:
    """Everything an encoder may read besides the transaction itself.

    ``run_at`` stands in for "now": file headers, export dates, fiscal
    year/period and run numbers are all derived from it, so encoding the same
    batch with the same context is byte-for-byte reproducible.
    """

    run_at: datetime
    lookups: LookupTables = field(default_factory=LookupTables)


# ---------------------------------------------------------------------------
# JSON adapters
# ---------------------------------------------------------------------------

transactions_adapter: TypeAdapter[list[NormalizedTransaction]] = TypeAdapter(
    list[NormalizedTransaction]
)
import_batch_adapter: TypeAdapter[ImportBatch] = TypeAdapter(ImportBatch)


def load_transactions(json_text: str | bytes) -> list[NormalizedTransaction]:
    """Parse a JSON array of normalized transactions."""

    return transactions_adapter.validate_json(json_text)


def dump_transactions(transactions: Sequence[NormalizedTransaction]) -> bytes:
    return transactions_adapter.dump_json(list(transactions), indent=2)


__all__ = [
    "MONTH_ABBREVIATIONS",
    "ImportKind",
    "ExportFormat",
    "DecodedClassification",
    "NormalizedTransaction",
    "ImportBatch",
    "MetadataItem",
    "Fund",
    "MethodOfPayment",
    "AccountHolder",
    "LookupTables",
    "ExportContext",
    "transactions_adapter",
    "import_batch_adapter",
    "load_transactions",
    "dump_transactions",
]
