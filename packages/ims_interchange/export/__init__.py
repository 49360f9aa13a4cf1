"""Export row encoders: one per downstream system.

Use :func:`encoder_for` to obtain the encoder for an :class:`ExportFormat`,
:func:`render_export` for the in-memory result (file text, or ledger rows for
the general ledger), and :func:`write_export` to produce the file itself.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..logging_setup import get_logger
from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .base import TextEncoder
from .council_tax_nndr import CouncilTaxNNDREncoder
from .general_ledger import GeneralLedgerEncoder, LedgerRow, write_workbook
from .housing_benefit_overpayments import HousingBenefitOverpaymentsEncoder
from .housing_rents import HousingRentsEncoder
from .parking_fines import ParkingFinesEncoder
from .sme_professional import SMEProfessionalEncoder
from .sundry_debtors import SundryDebtorsEncoder

_logger = get_logger("ims_interchange.export")


def encoder_for(fmt: ExportFormat | str) -> TextEncoder | GeneralLedgerEncoder:
    match ExportFormat(fmt):
        case ExportFormat.COUNCIL_TAX_NNDR:
            return CouncilTaxNNDREncoder()
        case ExportFormat.GENERAL_LEDGER:
            return GeneralLedgerEncoder()
        case ExportFormat.HOUSING_RENTS:
            return HousingRentsEncoder()
        case ExportFormat.HOUSING_BENEFIT_OVERPAYMENTS:
            return HousingBenefitOverpaymentsEncoder()
        case ExportFormat.SME_PROFESSIONAL:
            return SMEProfessionalEncoder()
        case ExportFormat.SUNDRY_DEBTORS:
            return SundryDebtorsEncoder()
        case ExportFormat.PARKING_FINES:
            return ParkingFinesEncoder()


def render_export(
    fmt: ExportFormat | str,
    transactions: Iterable[NormalizedTransaction],
    ctx: ExportContext,
) -> str | list[LedgerRow]:
    return encoder_for(fmt).render(transactions, ctx)


def write_export(
    fmt: ExportFormat | str,
    transactions: Iterable[NormalizedTransaction],
    ctx: ExportContext,
    path: Path | str | None = None,
) -> Path:
    """Render ``transactions`` and write the file for ``fmt``.

    ``path`` may be a file or a directory; for a directory (or ``None``, the
    current directory) the format's default file name for ``ctx.run_at`` is
    used. Text files are written byte-exact with CRLF line endings.
    """

    fmt = ExportFormat(fmt)
    target = Path(path) if path is not None else Path.cwd()
    if target.is_dir():
        target = target / fmt.default_file_name(ctx.run_at)

    result = render_export(fmt, transactions, ctx)
    if isinstance(result, str):
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the CRLF terminators as rendered
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(result)
        _logger.info("Wrote %s export to %s", fmt, target)
        return target
    return write_workbook(result, target)


__all__ = [
    "TextEncoder",
    "CouncilTaxNNDREncoder",
    "GeneralLedgerEncoder",
    "HousingBenefitOverpaymentsEncoder",
    "HousingRentsEncoder",
    "ParkingFinesEncoder",
    "SMEProfessionalEncoder",
    "SundryDebtorsEncoder",
    "LedgerRow",
    "encoder_for",
    "render_export",
    "write_export",
]
