"""Ingest entrypoints shared by the CLI and library callers.

Selects the adapter for an :class:`~ims_interchange.models.ImportKind` and
runs it over file text or a path on disk.
"""

from __future__ import annotations

import random
from datetime import datetime
from os import PathLike
from pathlib import Path

from ..models import ImportBatch, ImportKind


def classify_text(
    kind: ImportKind | str,
    text: str,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> ImportBatch:
    """Classify already-loaded file text with the adapter for ``kind``.

    Raises ``ValueError`` for an unknown kind.
    """

    from .adapters import bailiff_csv, payroll_deductions_csv, post_office_csv

    match ImportKind(kind):
        case ImportKind.BAILIFF:
            return bailiff_csv.to_import_batch(text, now=now, rng=rng)
        case ImportKind.PAYROLL_DEDUCTIONS:
            return payroll_deductions_csv.to_import_batch(text, now=now, rng=rng)
        case ImportKind.POST_OFFICE:
            return post_office_csv.to_import_batch(text, now=now, rng=rng)


def load_import(
    kind: ImportKind | str,
    path: str | PathLike[str],
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> ImportBatch:
    """Read ``path`` (UTF-8, BOM tolerated) and classify it."""

    kind = ImportKind(kind)
    text = Path(path).read_text(encoding="utf-8-sig")
    return classify_text(kind, text, now=now, rng=rng)


__all__ = ["classify_text", "load_import"]
