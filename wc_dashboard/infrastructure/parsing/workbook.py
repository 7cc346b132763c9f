"""Spreadsheet upload parser producing entity snapshots."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from wc_dashboard.domain.errors import UploadError, WcDashboardError
from wc_dashboard.domain.models import Entity, EntitySnapshot
from wc_dashboard.domain.quarters import latest, parse
from wc_dashboard.infrastructure.parsing.utils import clean_text, ensure_bytes, parse_amount

logger = logging.getLogger(__name__)

TEMPLATE_SHEET_NAME = "운전자본 데이터"
SUPPORTED_SUFFIXES = {".xlsx": "openpyxl", ".xls": "xlrd"}

# canonical field -> accepted header names
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "quarter": ("분기", "quarter"),
    "entity": ("법인", "entity"),
    "revenue": ("매출액", "revenue", "revenue_q"),
    "cogs": ("매출원가", "cogs", "cogs_q"),
    "ytd_revenue": ("누적매출액", "ytd_revenue", "revenue_ytd"),
    "ytd_cogs": ("누적매출원가", "ytd_cogs", "cogs_ytd"),
    "receivables": ("매출채권", "receivables"),
    "inventory": ("재고자산", "inventory"),
    "payables": ("매입채무", "payables"),
}
REQUIRED_COLUMNS = ("quarter", "entity")

TEMPLATE_ROWS = [
    {
        "분기": "25.3Q",
        "법인": Entity.DOMESTIC.value,
        "매출액": 430000,
        "매출원가": 258000,
        "매출채권": 75000,
        "재고자산": 220000,
        "매입채무": 140000,
    },
    {
        "분기": "25.3Q",
        "법인": Entity.CHINA.value,
        "매출액": 220000,
        "매출원가": 132000,
        "매출채권": 45000,
        "재고자산": 70000,
        "매입채무": 8000,
    },
]


@dataclass(frozen=True)
class UploadResult:
    snapshots: Sequence[EntitySnapshot]
    total_rows: int
    errors: Sequence[str] = field(default_factory=tuple)

    @property
    def valid_rows(self) -> int:
        return len(self.snapshots)

    @property
    def latest_quarter(self) -> str | None:
        found = latest(s.quarter for s in self.snapshots)
        return str(found) if found is not None else None

    @property
    def quarters(self) -> list[str]:
        seen: list[str] = []
        for snapshot in self.snapshots:
            label = str(snapshot.quarter)
            if label not in seen:
                seen.append(label)
        return seen


def engine_for(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UploadError(f"Only Excel files (.xlsx, .xls) can be uploaded: {filename}")
    return SUPPORTED_SUFFIXES[suffix]


def read_workbook_raw(source: BytesIO, engine: str) -> pd.DataFrame:
    return pd.read_excel(source, sheet_name=0, engine=engine, dtype=object)


def resolve_columns(columns: Sequence[object]) -> dict[str, str]:
    by_name = {str(column).strip().lower(): str(column) for column in columns}
    resolved: dict[str, str] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias.lower() in by_name:
                resolved[canonical] = by_name[alias.lower()]
                break
    missing = [name for name in REQUIRED_COLUMNS if name not in resolved]
    if missing:
        raise UploadError(f"Missing required columns: {', '.join(missing)}")
    return resolved


def row_to_snapshot(row: pd.Series, columns: dict[str, str]) -> EntitySnapshot:
    def cell(name: str) -> object:
        column = columns.get(name)
        return row.get(column) if column is not None else None

    def amount(name: str, label: str) -> Decimal | None:
        return parse_amount(cell(name), label)

    quarter = parse(clean_text(cell("quarter")))
    entity = Entity.parse(clean_text(cell("entity")))
    cogs = amount("cogs", "cogs")
    return EntitySnapshot(
        quarter=quarter,
        entity=entity,
        quarterly_revenue=amount("revenue", "revenue") or Decimal("0"),
        receivables=amount("receivables", "receivables") or Decimal("0"),
        inventory=amount("inventory", "inventory") or Decimal("0"),
        payables=amount("payables", "payables") or Decimal("0"),
        # a zero COGS cell means "not reported"
        quarterly_cogs=cogs if cogs else None,
        ytd_revenue=amount("ytd_revenue", "ytd_revenue"),
        ytd_cogs=amount("ytd_cogs", "ytd_cogs"),
    )


def dataframe_to_snapshots(df: pd.DataFrame) -> UploadResult:
    if df.empty:
        raise UploadError("The workbook contains no data rows")
    columns = resolve_columns(list(df.columns))

    snapshots: list[EntitySnapshot] = []
    errors: list[str] = []
    for position, (_, row) in enumerate(df.iterrows()):
        row_number = position + 2  # header is row 1
        try:
            snapshots.append(row_to_snapshot(row, columns))
        except (WcDashboardError, ValueError) as exc:
            errors.append(f"row {row_number}: {exc}")

    if errors:
        logger.warning("Skipped %d invalid row(s) of %d", len(errors), len(df))
    if not snapshots:
        raise UploadError("No valid rows found", details=errors)
    return UploadResult(snapshots=tuple(snapshots), total_rows=len(df), errors=tuple(errors))


def workbook_to_snapshots(source: BytesIO | Path | bytes, filename: str | None = None) -> UploadResult:
    if filename is None:
        if not isinstance(source, (Path, str)):
            raise UploadError("A filename is required to detect the workbook format")
        filename = str(source)
    engine = engine_for(filename)
    raw_bytes = ensure_bytes(source)
    dataframe = read_workbook_raw(BytesIO(raw_bytes), engine)
    result = dataframe_to_snapshots(dataframe)
    logger.info("Parsed %s: %d/%d valid rows", filename, result.valid_rows, result.total_rows)
    return result


def build_template() -> bytes:
    buffer = BytesIO()
    frame = pd.DataFrame(TEMPLATE_ROWS)
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=TEMPLATE_SHEET_NAME, index=False)
    return buffer.getvalue()
