"""Weighted-modulus check-digit schemes used by the council's account systems.

Every scheme maps a fixed-length numeric string to a single verification
letter:

    sum       = Σ digit[i] * weights[i]
    remainder = sum mod modulus
    value     = remainder                    when subtract_from == 0
              = subtract_from - remainder    otherwise
    letter    = letter_map[value]

Schemes in use
--------------
- ``######c``  weights 1..6, modulus 10, no subtraction, map
  ``0:A 1:C 2:E 3:F 4:H 5:J 6:K 7:L 8:M 9:P``, for council tax and non-domestic
  rates (same algorithm, different names).
- ``#######c`` weights 8..2, modulus 11, subtract from 11, map ``1:A .. 11:K``
  for fixed penalty notices and the 7-digit housing benefit overpayment
  references (sundry debtors share it).
- ``######c``  weights 7..2, modulus 11, subtract from 11, for 6-digit housing
  benefit overpayment references.
- ``########c`` weights 9..2, modulus 11, subtract from 11, for housing rents.

All functions are pure and safe to call from any thread.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


class InvalidInputError(ValueError):
    """Raised when the input is not exactly ``mask_length`` ASCII digits."""


class CheckDigitRangeError(LookupError):
    """Raised when a computed value has no letter in the scheme's map."""


@dataclass(frozen=True, slots=True)
class CheckDigitScheme:
    """Immutable description of one check-digit algorithm."""

    name: str
    mask_length: int
    weights: tuple[int, ...]
    modulus: int
    subtract_from: int
    letter_map: Mapping[int, str]

    def __post_init__(self) -> None:
        if len(self.weights) != self.mask_length:
            raise ValueError(
                f"CheckDigitScheme {self.name!r}: {len(self.weights)} weights for a "
                f"mask of length {self.mask_length}"
            )
        if self.modulus <= 0:
            raise ValueError(f"CheckDigitScheme {self.name!r}: modulus must be positive")


# ---------------------------------------------------------------------------
# Letter maps and scheme constants
# ---------------------------------------------------------------------------

_MOD10_LETTERS: Mapping[int, str] = MappingProxyType(dict(enumerate("ACEFHJKLMP")))
_MOD11_LETTERS: Mapping[int, str] = MappingProxyType(
    {value: letter for value, letter in enumerate("ABCDEFGHIJK", start=1)}
)


def _mod10(name: str) -> CheckDigitScheme:
    return CheckDigitScheme(
        name=name,
        mask_length=6,
        weights=(1, 2, 3, 4, 5, 6),
        modulus=10,
        subtract_from=0,
        letter_map=_MOD10_LETTERS,
    )


def _mod11(name: str, weights: tuple[int, ...]) -> CheckDigitScheme:
    return CheckDigitScheme(
        name=name,
        mask_length=len(weights),
        weights=weights,
        modulus=11,
        subtract_from=11,
        letter_map=_MOD11_LETTERS,
    )


NON_DOMESTIC_RATES = _mod10("non_domestic_rates")
COUNCIL_TAX = _mod10("council_tax")
FIXED_PENALTY_NOTICE = _mod11("fixed_penalty_notice", (8, 7, 6, 5, 4, 3, 2))
HOUSING_BENEFIT_OVERPAYMENT_7 = _mod11("housing_benefit_overpayment_7", (8, 7, 6, 5, 4, 3, 2))
HOUSING_BENEFIT_OVERPAYMENT_6 = _mod11("housing_benefit_overpayment_6", (7, 6, 5, 4, 3, 2))
HOUSING_RENTS = _mod11("housing_rents", (9, 8, 7, 6, 5, 4, 3, 2))

SCHEMES: Mapping[str, CheckDigitScheme] = MappingProxyType(
    {
        s.name: s
        for s in (
            NON_DOMESTIC_RATES,
            COUNCIL_TAX,
            FIXED_PENALTY_NOTICE,
            HOUSING_BENEFIT_OVERPAYMENT_7,
            HOUSING_BENEFIT_OVERPAYMENT_6,
            HOUSING_RENTS,
        )
    }
)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def _validate(scheme: CheckDigitScheme, digits: str) -> None:
    if not isinstance(digits, str) or len(digits) != scheme.mask_length:
        raise InvalidInputError(
            f"{scheme.name}: input must be exactly {scheme.mask_length} digits, got {digits!r}"
        )
    # str.isdigit() accepts non-ASCII digits such as '²'; only 0-9 are valid.
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidInputError(f"{scheme.name}: input must contain only digits, got {digits!r}")


def compute_check_digit(scheme: CheckDigitScheme, digits: str) -> str:
    """Return the check letter for ``digits`` under ``scheme``.

    Raises
    ------
    InvalidInputError
        When ``digits`` is not exactly ``scheme.mask_length`` ASCII digits.
    CheckDigitRangeError
        When the computed value is not in the scheme's letter map.
    """

    _validate(scheme, digits)
    total = sum(int(ch) * w for ch, w in zip(digits, scheme.weights, strict=True))
    remainder = total % scheme.modulus
    value = remainder if scheme.subtract_from == 0 else scheme.subtract_from - remainder
    try:
        return scheme.letter_map[value]
    except KeyError as exc:
        raise CheckDigitRangeError(
            f"{scheme.name}: computed value {value} has no check letter"
        ) from exc


def append_check_digit(scheme: CheckDigitScheme, digits: str) -> str:
    """Return ``digits`` followed by its check letter."""

    return f"{digits}{compute_check_digit(scheme, digits)}"


def validate_check_digit(scheme: CheckDigitScheme, value: str | None) -> bool:
    """Return ``True`` when ``value`` is a well-formed reference with a correct check letter.

    Malformed values (wrong length, non-digits in the body) return ``False``
    rather than raising; this is the "does this account number look right"
    question, not a computation request.
    """

    if value is None or len(value) != scheme.mask_length + 1:
        return False
    body, letter = value[:-1], value[-1]
    try:
        return compute_check_digit(scheme, body) == letter.upper()
    except (InvalidInputError, CheckDigitRangeError):
        return False


# Named helpers, one per account system.


def add_non_domestic_rates_check_digit(value: str) -> str:
    return append_check_digit(NON_DOMESTIC_RATES, value)


def add_council_tax_check_digit(value: str) -> str:
    return append_check_digit(COUNCIL_TAX, value)


def add_fixed_penalty_notice_check_digit(value: str) -> str:
    return append_check_digit(FIXED_PENALTY_NOTICE, value)


def add_housing_benefit_overpayment7_check_digit(value: str) -> str:
    return append_check_digit(HOUSING_BENEFIT_OVERPAYMENT_7, value)


def add_housing_benefit_overpayment6_check_digit(value: str) -> str:
    return append_check_digit(HOUSING_BENEFIT_OVERPAYMENT_6, value)


def add_housing_rents_check_digit(value: str) -> str:
    return append_check_digit(HOUSING_RENTS, value)


__all__ = [
    "CheckDigitScheme",
    "InvalidInputError",
    "CheckDigitRangeError",
    "NON_DOMESTIC_RATES",
    "COUNCIL_TAX",
    "FIXED_PENALTY_NOTICE",
    "HOUSING_BENEFIT_OVERPAYMENT_7",
    "HOUSING_BENEFIT_OVERPAYMENT_6",
    "HOUSING_RENTS",
    "SCHEMES",
    "compute_check_digit",
    "append_check_digit",
    "validate_check_digit",
    "add_non_domestic_rates_check_digit",
    "add_council_tax_check_digit",
    "add_fixed_penalty_notice_check_digit",
    "add_housing_benefit_overpayment7_check_digit",
    "add_housing_benefit_overpayment6_check_digit",
    "add_housing_rents_check_digit",
]
