"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .analysis.entities import CachedAnalysis
from .models import EntitySnapshot


class SnapshotRepository(Protocol):
    """Provides entity snapshots from an upstream source."""

    def list_snapshots(self) -> Sequence[EntitySnapshot]:
        ...


class AnalysisStore(Protocol):
    """Key-value store for generated narratives keyed by quarter, entity and kind."""

    def get(self, quarter: str, entity: str, kind: str) -> CachedAnalysis | None:
        ...

    def put(self, analysis: CachedAnalysis) -> CachedAnalysis:
        ...

    def delete(self, quarter: str, entity: str | None = None) -> int:
        ...

    def list_quarters(self) -> list[str]:
        ...
