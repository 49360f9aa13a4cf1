"""Common shape of the text export encoders.

Each destination format provides:

- ``accepts(tx, ctx)``: whether the transaction belongs in this file
  (usually a fund code, sometimes an account-reference prefix too);
- ``to_row(tx, ctx)``: the format's row record with every field already
  rendered to its final text;
- ``serialize(row)``: the row as one output line (or block of lines).

:meth:`TextEncoder.render` filters, converts and serializes a whole batch and
adds any header lines, producing the exact file contents.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import ClassVar, Generic, TypeVar

from ..logging_setup import get_logger
from ..models import ExportContext, ExportFormat, NormalizedTransaction
from .formatting import join_lines

RowT = TypeVar("RowT")

_logger = get_logger("ims_interchange.export")


class TextEncoder(Generic[RowT]):
    """Base class for encoders whose output is a text file."""

    export_format: ClassVar[ExportFormat]

    def accepts(self, tx: NormalizedTransaction, ctx: ExportContext) -> bool:
        raise NotImplementedError

    def to_row(self, tx: NormalizedTransaction, ctx: ExportContext) -> RowT:
        raise NotImplementedError

    def serialize(self, row: RowT) -> str:
        raise NotImplementedError

    def header(self, rows: Sequence[RowT], ctx: ExportContext) -> list[str]:
        """Lines written before the rows. Most formats have none."""

        return []

    def select(
        self, transactions: Iterable[NormalizedTransaction], ctx: ExportContext
    ) -> list[NormalizedTransaction]:
        return [tx for tx in transactions if self.accepts(tx, ctx)]

    def rows(
        self, transactions: Iterable[NormalizedTransaction], ctx: ExportContext
    ) -> list[RowT]:
        return [self.to_row(tx, ctx) for tx in self.select(transactions, ctx)]

    def render(self, transactions: Iterable[NormalizedTransaction], ctx: ExportContext) -> str:
        """Return the complete file contents for ``transactions``."""

        rows = self.rows(transactions, ctx)
        _logger.info("%s: %d row(s)", self.export_format, len(rows))
        return join_lines([*self.header(rows, ctx), *(self.serialize(r) for r in rows)])


__all__ = ["TextEncoder"]
