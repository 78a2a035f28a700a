from decimal import Decimal

import pytest

from gigboard.core.errors import ValidationError
from gigboard.core.money import parse_positive_amount


@pytest.mark.parametrize(
    "raw, expected",
    [
        (500, Decimal("500.00")),
        ("450.5", Decimal("450.50")),
        (" 12.345 ", Decimal("12.35")),
        (Decimal("0.01"), Decimal("0.01")),
    ],
)
def test_accepts_positive_amounts(raw, expected):
    assert parse_positive_amount(raw, "bad price") == expected


@pytest.mark.parametrize("raw", [None, "", "  ", "abc", 0, "-5", "0.004", "NaN", "Infinity", True, "1e12", "1e30", 1e30])
def test_rejects_everything_else(raw):
    with pytest.raises(ValidationError) as exc:
        parse_positive_amount(raw, "bad price")
    assert exc.value.message == "bad price"
