"""Public interface for the ``ims_interchange`` package.

Check-digit codec, payment-reference decoder, inbound file classifiers and
the export encoders for the council's downstream finance systems. There is
no runtime logic here, only symbol re-exports from :mod:`.api`.
"""

from .api import (
    SCHEMES,
    CheckDigitRangeError,
    InvalidInputError,
    append_check_digit,
    classify_text,
    compute_check_digit,
    decode,
    encoder_for,
    load_import,
    render_export,
    validate_check_digit,
    write_export,
)
from .models import (
    DecodedClassification,
    ExportContext,
    ExportFormat,
    ImportBatch,
    ImportKind,
    LookupTables,
    NormalizedTransaction,
)

__all__ = [
    # API
    "SCHEMES",
    "append_check_digit",
    "compute_check_digit",
    "validate_check_digit",
    "decode",
    "classify_text",
    "load_import",
    "encoder_for",
    "render_export",
    "write_export",
    # Errors
    "InvalidInputError",
    "CheckDigitRangeError",
    # Models / types
    "DecodedClassification",
    "NormalizedTransaction",
    "ImportBatch",
    "ImportKind",
    "ExportFormat",
    "ExportContext",
    "LookupTables",
]
