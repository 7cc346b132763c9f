"""Snapshot repositories backed by workbooks, CSV files or memory."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd

from wc_dashboard.domain.models import EntitySnapshot
from wc_dashboard.domain.repositories import SnapshotRepository
from wc_dashboard.infrastructure.parsing.utils import ensure_bytes
from wc_dashboard.infrastructure.parsing.workbook import (
    UploadResult,
    dataframe_to_snapshots,
    workbook_to_snapshots,
)

logger = logging.getLogger(__name__)


class WorkbookSnapshotRepository(SnapshotRepository):
    def __init__(self, source: BytesIO | Path | bytes, filename: str | None = None) -> None:
        if filename is None and isinstance(source, (Path, str)):
            filename = Path(source).name
        self._source = ensure_bytes(source)
        self._filename = filename
        self.last_result: UploadResult | None = None

    def list_snapshots(self) -> Sequence[EntitySnapshot]:
        result = workbook_to_snapshots(BytesIO(self._source), filename=self._filename)
        self.last_result = result
        return result.snapshots


class CsvSnapshotRepository(SnapshotRepository):
    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self.last_result: UploadResult | None = None

    def list_snapshots(self) -> Sequence[EntitySnapshot]:
        frame = pd.read_csv(self._path, dtype=str, keep_default_na=False, encoding="utf-8")
        result = dataframe_to_snapshots(frame)
        self.last_result = result
        logger.info("Loaded %d snapshots from %s", result.valid_rows, self._path)
        return result.snapshots


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self, snapshots: Iterable[EntitySnapshot] = ()) -> None:
        self._snapshots = tuple(snapshots)

    def list_snapshots(self) -> Sequence[EntitySnapshot]:
        return self._snapshots


def repository_for(source: Path | str) -> SnapshotRepository:
    path = Path(source)
    if path.suffix.lower() == ".csv":
        return CsvSnapshotRepository(path)
    return WorkbookSnapshotRepository(path, filename=path.name)
