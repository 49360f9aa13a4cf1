"""Field-formatting primitives shared by the export encoders.

Every downstream file is a fixed contract with a legacy system, so these
helpers are deliberately literal:

- :func:`fit` truncates from the left edge and pads to an exact width.
- :func:`minor_units` renders an absolute amount in pence, right-aligned, and
  never raises: ``None`` becomes a zero of the declared width and an amount
  too large for the width becomes all nines.
- :func:`fixed_2dp` renders a signed amount with exactly two decimals.
- :func:`format_date` is a locale-independent ``strftime``.
- :func:`compose_narrative` builds ``Label:value; `` sequences.
- :func:`join_lines` terminates every line with CRLF.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, localcontext
from typing import Literal

from ..logging_setup import get_logger
from ..models import MONTH_ABBREVIATIONS

LINE_TERMINATOR = "\r\n"

_CENTS = Decimal("0.01")

_logger = get_logger("ims_interchange.export.formatting")


def filler(length: int) -> str:
    return " " * length


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def fit(
    value: str | None,
    width: int,
    *,
    fill: str = " ",
    align: Literal["left", "right"] = "left",
) -> str:
    """Trim ``value``, keep its first ``width`` characters, and pad to ``width``.

    ``align="left"`` pads on the right; ``align="right"`` pads on the left.
    ``None`` is treated as the empty string.
    """

    s = (value or "").strip()[:width]
    return s.ljust(width, fill) if align == "left" else s.rjust(width, fill)


def round_2dp(amount: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    with localcontext() as ctx:
        # Large amounts must not trip the default 28-digit precision.
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        q = amount.quantize(_CENTS, rounding=rounding)
    # Avoid rendering "-0.00".
    return q.copy_abs() if q.is_zero() else q


def fixed_2dp(amount: Decimal) -> str:
    """Render ``amount`` with exactly two decimals and a leading ``-`` when negative."""

    return f"{round_2dp(amount):.2f}"


def minor_units(amount: Decimal | None, width: int, *, fill: str = " ") -> str:
    """Render ``abs(amount)`` in pence, right-aligned in ``width`` characters.

    ``1168.94`` → ``"116894"`` padded to ``width``; ``2.125`` → ``"212"``.
    ``None`` renders as ``"0"`` padded to ``width``. When the pence value
    needs more than ``width`` digits the result is ``width`` nines, so the row
    is still written and the wrong amount is visible to whoever checks the file.
    """

    if amount is None:
        return "0".rjust(width, fill)
    if not amount.is_finite():
        _logger.warning("Amount %s is not a number; writing sentinel", amount)
        return "9" * width
    # Pence round half to even at both steps, unlike fixed_2dp which rounds half up.
    cents = round_2dp(amount, ROUND_HALF_EVEN)
    pence = (cents * 100).to_integral_value(rounding=ROUND_HALF_EVEN)
    digits = str(abs(int(pence)))
    if len(digits) > width:
        _logger.warning("Amount %s does not fit in %d digits; writing sentinel", amount, width)
        return "9" * width
    return digits.rjust(width, fill)


def check_digit_suffix(reference: str | None) -> str:
    """Return the last character of ``reference`` (its check letter), or ``""``."""

    return "" if is_blank(reference) else reference.strip()[-1]


def format_date(value: datetime, fmt: str) -> str:
    """``strftime`` with English month abbreviations regardless of locale.

    Only ``%b`` is locale-sensitive among the directives the encoders use.
    """

    return value.strftime(fmt.replace("%b", MONTH_ABBREVIATIONS[value.month - 1]))


def compose_narrative(fields: Iterable[tuple[str, object]]) -> str:
    """Concatenate ``Label:value; `` for each field, in order."""

    return "".join(f"{label}:{'' if value is None else value}; " for label, value in fields)


def join_lines(lines: Iterable[str]) -> str:
    return "".join(f"{line}{LINE_TERMINATOR}" for line in lines)


__all__ = [
    "LINE_TERMINATOR",
    "filler",
    "is_blank",
    "fit",
    "round_2dp",
    "fixed_2dp",
    "minor_units",
    "check_digit_suffix",
    "format_date",
    "compose_narrative",
    "join_lines",
]
