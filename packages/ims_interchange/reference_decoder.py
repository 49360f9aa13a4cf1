"""Decode fund code and account reference from post-office payment references.

The payment network issues 19–24 character references. Those starting with
the council's 8-digit network prefix embed the revenue stream and the account
number at fixed positions (0-indexed):

- index 11 (``pos12``): revenue-stream digit;
- index 15 (``pos16``) and the two characters at 15–16 (``pos1617``):
  disambiguate housing benefit overpayments (``"06"``) and sundry/income
  references (``"01"`` .. ``"05"``) under streams 6 and 7;
- the account number body starts at index 16 (council tax / NNDR, 6 digits),
  15 (overpayments / sundry, 7 digits) or 14 (rents, 8 digits) and always
  ends at index 21, so account decoding needs at least 22 characters.

These rules were recovered from sample files rather than a published format
and are kept as literal rules; any divergence observed in live data should go
to a human for review instead of being "tidied" here.

:func:`decode` is total: it never raises, returning an empty classification
for anything that does not match.
"""

from __future__ import annotations

from .checkdigit import (
    InvalidInputError,
    add_council_tax_check_digit,
    add_housing_benefit_overpayment7_check_digit,
    add_housing_rents_check_digit,
)
from .logging_setup import get_logger
from .models import DecodedClassification

NETWORK_PREFIX = "98265029"

# Minimum length for the account-number body to be present.
_ACCOUNT_MIN_LENGTH = 22

_FUND_ONE_SUFFIXES = frozenset({"01", "02", "03", "04", "05"})

_logger = get_logger("ims_interchange.reference_decoder")


def _char_at(reference: str, index: int) -> str:
    return reference[index] if len(reference) > index else ""


def _replace_letters_with_zero(value: str) -> str:
    return "".join("0" if ch.isalpha() else ch for ch in value)


def _fund_code(pos12: str, pos16: str, pos1617: str) -> str:
    if pos12 in {"6", "7"} and (pos16 == "6" or pos1617 == "06"):
        return "6"
    if pos12 == "7" and pos1617 in _FUND_ONE_SUFFIXES:
        return "1"
    if pos12.isascii() and pos12.isdigit():
        return str(int(pos12))
    return ""


def _account_reference(reference: str, pos12: str) -> str:
    if len(reference) < _ACCOUNT_MIN_LENGTH:
        return ""
    if pos12 in {"2", "5"}:
        # NNDR uses the same scheme as council tax.
        body, add_check_digit = reference[16:22], add_council_tax_check_digit
    elif pos12 in {"6", "7"}:
        # Sundry debtors share the 7-digit overpayment scheme.
        body, add_check_digit = reference[15:22], add_housing_benefit_overpayment7_check_digit
    elif pos12 == "8":
        body, add_check_digit = reference[14:22], add_housing_rents_check_digit
    else:
        return ""

    try:
        return add_check_digit(_replace_letters_with_zero(body))
    except InvalidInputError as exc:
        _logger.warning("Cannot derive account reference from %r: %s", reference, exc)
        return ""


def decode(raw_reference: str | None) -> DecodedClassification:
    """Return the ``(fund_code, account_reference)`` embedded in ``raw_reference``.

    Parameters
    ----------
    raw_reference:
        The reference exactly as supplied by the payment network.

    Returns
    -------
    DecodedClassification
        Empty strings for both fields when the reference is missing, shorter
        than the prefix, or not issued under :data:`NETWORK_PREFIX`. Fund
        code and account reference are resolved independently: a reference
        can yield one without the other.
    """

    if not raw_reference or len(raw_reference) < len(NETWORK_PREFIX):
        return DecodedClassification()
    if not raw_reference.startswith(NETWORK_PREFIX):
        return DecodedClassification()

    pos12 = _char_at(raw_reference, 11)
    pos16 = _char_at(raw_reference, 15)
    pos1617 = raw_reference[15:17] if len(raw_reference) >= 17 else ""

    return DecodedClassification(
        fund_code=_fund_code(pos12, pos16, pos1617),
        account_reference=_account_reference(raw_reference, pos12),
    )


__all__ = ["NETWORK_PREFIX", "decode"]
