"""Public API for the ``ims_interchange`` package.

This module serves as a stable import surface. The implementations live in
the codec, decoder, ingest and export modules and are re-exported here so
callers (and the CLI) need only one import path.
"""

from __future__ import annotations

from .checkdigit import (
    SCHEMES,
    CheckDigitRangeError,
    CheckDigitScheme,
    InvalidInputError,
    append_check_digit,
    compute_check_digit,
    validate_check_digit,
)
from .export import encoder_for, render_export, write_export
from .export.general_ledger import LedgerRow, to_dataframe, write_workbook
from .ingest import classify_text, load_import
from .models import (
    DecodedClassification,
    ExportContext,
    ExportFormat,
    ImportBatch,
    ImportKind,
    LookupTables,
    NormalizedTransaction,
    dump_transactions,
    import_batch_adapter,
    load_transactions,
)
from .reference_decoder import decode

__all__ = [
    "SCHEMES",
    "CheckDigitRangeError",
    "CheckDigitScheme",
    "InvalidInputError",
    "append_check_digit",
    "compute_check_digit",
    "validate_check_digit",
    "decode",
    "classify_text",
    "load_import",
    "encoder_for",
    "render_export",
    "write_export",
    "LedgerRow",
    "to_dataframe",
    "write_workbook",
    "DecodedClassification",
    "ExportContext",
    "ExportFormat",
    "ImportBatch",
    "ImportKind",
    "LookupTables",
    "NormalizedTransaction",
    "dump_transactions",
    "import_batch_adapter",
    "load_transactions",
]
