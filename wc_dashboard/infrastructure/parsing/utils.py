"""Shared parsing utilities for spreadsheet ingestion."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path

import pandas as pd

BLANK_MARKERS = {"", "-", "NAN", "NONE", "NULL"}


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, (Path, str)):
        return Path(source).read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    return str(value).strip().upper() in BLANK_MARKERS


def parse_amount(value: object, field_name: str) -> Decimal | None:
    """Parse a non-negative monetary cell; ``None`` for blank cells.

    Raises ``ValueError`` naming ``field_name`` for non-numeric or negative
    input.
    """
    if is_blank(value):
        return None
    s = str(value).strip()
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "$", "₩", "€", "£", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"{field_name} must be numeric (got {value!r})") from None
    if not result.is_finite():
        raise ValueError(f"{field_name} must be numeric (got {value!r})")
    if negative:
        result = -result
    if result < 0:
        raise ValueError(f"{field_name} cannot be negative (got {value!r})")
    return result


def clean_text(value: object) -> str:
    if is_blank(value):
        return ""
    return str(value).strip()
