"""Helpers shared by the inbound-file adapters.

Covers headerless CSV loading, amount and date parsing, VAT apportionment and
the synthetic references the council's transaction system expects on every
imported row.
"""

from __future__ import annotations

import csv
import random
import string
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from io import StringIO

from ..logging_setup import get_logger
from ..models import ImportBatch, NormalizedTransaction

_logger = get_logger("ims_interchange.ingest")

# Office code stamped on every imported row.
OFFICE_CODE = "S"

_INTERNAL_REFERENCE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
_INTERNAL_REFERENCE_LENGTH = 16


@dataclass(frozen=True, slots=True)
class FundDetails:
    """Fund code and VAT treatment for a named revenue stream."""

    fund_code: str
    vat_code: str
    vat_rate: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class SourceRow:
    """One non-blank CSV record with its 1-based position among records."""

    number: int
    cells: tuple[str, ...]

    def get(self, index: int) -> str:
        # Trailing fields may be missing entirely.
        return self.cells[index] if index < len(self.cells) else ""


class RowError(ValueError):
    """A source row that cannot be turned into a transaction."""


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def read_rows(text: str) -> Iterator[SourceRow]:
    """Yield trimmed, headerless RFC 4180 records, skipping blank lines."""

    with StringIO(text) as f:
        number = 0
        for cells in csv.reader(f):
            if not cells or all(not c.strip() for c in cells):
                continue
            number += 1
            yield SourceRow(number=number, cells=tuple(c.strip() for c in cells))


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def parse_amount(raw: str | None) -> Decimal:
    """Parse a money amount in major units.

    Accepts an optional sign, a leading ``£`` and thousands separators;
    surrounding parentheses mark a negative amount.
    """

    if raw is None or not raw.strip():
        raise RowError("amount is empty")
    s = raw.strip()
    negative = False
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("£"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "")
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise RowError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise RowError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def parse_date(raw: str | None, fmt: str) -> datetime:
    """Parse ``raw`` with a ``strptime`` format, raising :class:`RowError` on failure."""

    if raw is None or not raw.strip():
        raise RowError("date is empty")
    try:
        return datetime.strptime(raw.strip(), fmt)
    except ValueError as exc:
        raise RowError(f"invalid date {raw!r} (expected {fmt})") from exc


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


def vat_amount(amount: Decimal, vat_rate: Decimal) -> Decimal:
    """Return the VAT included in a gross ``amount``.

    ``amount - amount / (1 + rate)``: £1.20 at 20% carries 20p of VAT.
    """

    if not vat_rate:
        return Decimal("0")
    return amount - amount / (1 + vat_rate)


def generate_internal_reference(rng: random.Random | None = None) -> str:
    """Return a random 16-character alphanumeric reference."""

    chooser = rng if rng is not None else random.SystemRandom()
    return "".join(chooser.choices(_INTERNAL_REFERENCE_ALPHABET, k=_INTERNAL_REFERENCE_LENGTH))


def psp_reference(tag: str, now: datetime, sequence: int | str, *, date_format: str) -> str:
    """Compose ``<tag>-<date>-<sequence>``, e.g. ``BLF-250513-4``."""

    return f"{tag}-{now.strftime(date_format)}-{sequence}"


# ---------------------------------------------------------------------------
# Batch assembly
# ---------------------------------------------------------------------------


def build_batch(
    rows: Iterable[SourceRow],
    convert: Callable[[SourceRow], NormalizedTransaction],
    *,
    import_type_id: int,
    notes: str,
    source: str,
    excluded: int = 0,
    errors: Iterable[str] = (),
) -> ImportBatch:
    """Convert ``rows`` into an :class:`ImportBatch`, excluding rows that fail.

    ``convert`` raises :class:`RowError` for a row it cannot use; the row is
    logged, described in ``errors`` and counted in ``excluded``. Any other
    exception propagates. ``excluded`` and ``errors`` seed the counts with
    rows the caller already dropped (e.g. duplicates flagged by the source).
    """

    accepted: list[NormalizedTransaction] = []
    messages = list(errors)
    for row in rows:
        try:
            accepted.append(convert(row))
        except RowError as exc:
            message = f"{source} row {row.number}: {exc}"
            _logger.warning("Excluding %s", message)
            messages.append(message)
            excluded += 1

    _logger.info("%s: %d row(s) accepted, %d excluded", source, len(accepted), excluded)
    return ImportBatch(
        import_type_id=import_type_id,
        notes=notes,
        rows=tuple(accepted),
        errors=tuple(messages),
        excluded=excluded,
    )


__all__ = [
    "OFFICE_CODE",
    "FundDetails",
    "SourceRow",
    "RowError",
    "read_rows",
    "parse_amount",
    "parse_date",
    "vat_amount",
    "generate_internal_reference",
    "psp_reference",
    "build_batch",
]
