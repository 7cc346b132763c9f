import itertools

import pytest

from wc_dashboard.domain import quarters
from wc_dashboard.domain.errors import InvalidQuarterFormat
from wc_dashboard.domain.quarters import FiscalQuarter

LABELS = ["24.1Q", "24.2Q", "24.3Q", "24.4Q", "25.1Q", "25.2Q", "25.3Q", "23.4Q", "09.2Q"]


def test_parse_valid_label():
    quarter = quarters.parse("25.3Q")

    assert quarter == FiscalQuarter(year=2025, quarter_number=3)
    assert quarter.year == 2025
    assert quarter.quarter_number == 3


@pytest.mark.parametrize(
    "label",
    ["2025.3Q", "25.3", "25-3Q", "25.3q", "25.5Q", "25.0Q", "", "Q3 2025", "٢٥.٣Q", "２５.３Q", " 25.3Q ", "25.3Q\n"],
)
def test_parse_rejects_malformed_labels(label):
    with pytest.raises(InvalidQuarterFormat) as excinfo:
        quarters.parse(label)

    assert "YY.NQ" in str(excinfo.value)


def test_parse_rejects_non_string():
    with pytest.raises(InvalidQuarterFormat):
        quarters.parse(253)  # type: ignore[arg-type]


def test_label_round_trip():
    for label in LABELS:
        assert str(quarters.parse(label)) == label


def test_compare_is_antisymmetric_and_reflexive():
    for a, b in itertools.product(LABELS, repeat=2):
        assert quarters.compare(a, b) == -quarters.compare(b, a)
    for a in LABELS:
        assert quarters.compare(a, a) == 0


def test_compare_orders_by_year_then_quarter():
    assert quarters.compare("24.4Q", "25.1Q") < 0
    assert quarters.compare("25.2Q", "25.1Q") > 0


def test_compare_rejects_malformed_input():
    with pytest.raises(InvalidQuarterFormat):
        quarters.compare("25.3Q", "bad")


def test_latest():
    assert str(quarters.latest(["24.3Q", "25.2Q", "25.1Q"])) == "25.2Q"
    assert quarters.latest([]) is None


def test_year_ago():
    assert quarters.year_ago("25.3Q") == "24.3Q"
    assert quarters.year_ago("00.1Q") == "99.1Q"
    assert quarters.year_ago("not a quarter") is None


def test_previous_quarter_wraps_year():
    assert quarters.previous_quarter("25.1Q") == "24.4Q"
    assert quarters.previous_quarter("25.3Q") == "25.2Q"
    assert quarters.previous_quarter("bad") is None


def test_sort_ascending_is_idempotent():
    once = quarters.sort_ascending(LABELS)
    twice = quarters.sort_ascending(once)

    assert once == twice
    assert once[:3] == ["09.2Q", "23.4Q", "24.1Q"]
    assert once[-1] == "25.3Q"


def test_quarter_range():
    assert quarters.quarter_range("24.3Q", "25.2Q") == ["24.3Q", "24.4Q", "25.1Q", "25.2Q"]
    assert quarters.quarter_range("25.2Q", "24.3Q") == []


def test_format_quarter():
    assert quarters.format_quarter("25.3Q") == "2025 Q3"
    assert quarters.format_quarter("oops") == "oops"


def test_is_valid():
    assert quarters.is_valid("24.1Q")
    assert not quarters.is_valid("24.9Q")
    assert not quarters.is_valid(None)
