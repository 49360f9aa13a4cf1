from datetime import datetime
from decimal import Decimal

import pytest

from ims_interchange.export.formatting import (
    check_digit_suffix,
    compose_narrative,
    fit,
    fixed_2dp,
    format_date,
    join_lines,
    minor_units,
)


def test_fit_truncates_and_pads():
    assert fit("abc", 5) == "abc  "
    assert fit("abcdefg", 3) == "abc"
    assert fit("  ab  ", 4) == "ab  "
    assert fit(None, 3, fill="0") == "000"
    assert fit("12", 4, fill="0", align="right") == "0012"


@pytest.mark.parametrize(
    "amount, width, expected",
    [
        (Decimal("1168.94"), 10, "    116894"),
        (Decimal("-1168.94"), 10, "    116894"),
        # half-penny midpoints go to the even penny
        (Decimal("0.005"), 4, "   0"),
        (Decimal("0.015"), 4, "   2"),
        (Decimal("2.125"), 10, "       212"),
        (Decimal("0.135"), 10, "        14"),
        (Decimal("-2.125"), 10, "       212"),
        (Decimal("0.004"), 4, "   0"),
        (Decimal("12"), 6, "  1200"),
        (None, 10, "         0"),
        (Decimal("123456.78"), 6, "999999"),
        (Decimal("NaN"), 6, "999999"),
    ],
)
def test_minor_units(amount, width, expected):
    assert minor_units(amount, width) == expected


def test_minor_units_overflow_is_logged(caplog):
    caplog.set_level("WARNING", logger="ims_interchange")
    minor_units(Decimal("1000000000"), 10)
    assert any("does not fit" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("2.345"), "2.35"),
        (Decimal("-2.345"), "-2.35"),
        (Decimal("10"), "10.00"),
        (Decimal("-0.001"), "0.00"),
        (Decimal("123456789012345678901234567890.125"), "123456789012345678901234567890.13"),
    ],
)
def test_fixed_2dp(amount, expected):
    assert fixed_2dp(amount) == expected


def test_check_digit_suffix():
    assert check_digit_suffix("411926C ") == "C"
    assert check_digit_suffix("") == ""
    assert check_digit_suffix(None) == ""


def test_format_date_uses_english_month_names():
    when = datetime(2025, 3, 4, 7, 8, 9)
    assert format_date(when, "%d-%b-%Y") == "04-Mar-2025"
    assert format_date(when, "%d %b %y ") == "04 Mar 25 "
    assert format_date(when, "%H:%M") == "07:08"


def test_compose_narrative():
    assert compose_narrative([("A", 1), ("B", None), ("C", "x")]) == "A:1; B:; C:x; "


def test_join_lines_terminates_every_line():
    assert join_lines(["a", "", "b"]) == "a\r\n\r\nb\r\n"
    assert join_lines([]) == ""
