"""Fiscal-quarter algebra for ``YY.NQ`` labels.

Every comparison, sort and range filter in the package goes through this
module so that a malformed label is rejected in exactly one place.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, Union

from .errors import InvalidQuarterFormat

QUARTER_PATTERN = re.compile(r"(\d{2})\.(\d)Q", re.ASCII)
CENTURY = 2000


@dataclass(frozen=True, order=True)
class FiscalQuarter:
    """Parsed fiscal quarter; ordering follows (year, quarter_number)."""

    year: int
    quarter_number: int

    def __str__(self) -> str:
        return f"{self.year % 100:02d}.{self.quarter_number}Q"

    @property
    def label(self) -> str:
        return str(self)

    def shift(self, quarters: int) -> "FiscalQuarter":
        index = self.year * 4 + (self.quarter_number - 1) + quarters
        return FiscalQuarter(year=index // 4, quarter_number=index % 4 + 1)


QuarterLike = Union[str, FiscalQuarter]


def parse(label: QuarterLike) -> FiscalQuarter:
    if isinstance(label, FiscalQuarter):
        return label
    if not isinstance(label, str):
        raise InvalidQuarterFormat(label)
    match = QUARTER_PATTERN.fullmatch(label)
    if not match:
        raise InvalidQuarterFormat(label)
    quarter_number = int(match.group(2))
    if not 1 <= quarter_number <= 4:
        raise InvalidQuarterFormat(label)
    return FiscalQuarter(year=CENTURY + int(match.group(1)), quarter_number=quarter_number)


def is_valid(label: object) -> bool:
    try:
        parse(label)  # type: ignore[arg-type]
    except InvalidQuarterFormat:
        return False
    return True


def compare(a: QuarterLike, b: QuarterLike) -> int:
    qa, qb = parse(a), parse(b)
    if qa.year != qb.year:
        return qa.year - qb.year
    return qa.quarter_number - qb.quarter_number


def latest(labels: Iterable[QuarterLike]) -> FiscalQuarter | None:
    result: FiscalQuarter | None = None
    for label in labels:
        current = parse(label)
        if result is None or compare(current, result) > 0:
            result = current
    return result


def year_ago(label: QuarterLike) -> str | None:
    """Same quarter one year earlier, or ``None`` when ``label`` is malformed."""
    try:
        quarter = parse(label)
    except InvalidQuarterFormat:
        return None
    return str(quarter.shift(-4))


def previous_quarter(label: QuarterLike) -> str | None:
    try:
        quarter = parse(label)
    except InvalidQuarterFormat:
        return None
    return str(quarter.shift(-1))


def sort_ascending(labels: Iterable[QuarterLike]) -> list[str]:
    items = [label if isinstance(label, str) else str(label) for label in labels]
    return sorted(items, key=cmp_to_key(compare))


def quarter_range(start: QuarterLike, end: QuarterLike) -> list[str]:
    first, last = parse(start), parse(end)
    labels: list[str] = []
    current = first
    while current <= last:
        labels.append(str(current))
        current = current.shift(1)
    return labels


def format_quarter(label: QuarterLike) -> str:
    try:
        quarter = parse(label)
    except InvalidQuarterFormat:
        return str(label)
    return f"{quarter.year} Q{quarter.quarter_number}"
