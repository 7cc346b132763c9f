"""Application-level DTOs for the dashboard workflow."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import EnrichedSnapshot


@dataclass(slots=True, frozen=True)
class DashboardRequest:
    start_quarter: str | None = None
    end_quarter: str | None = None
    entity: str | None = None


@dataclass(slots=True, frozen=True)
class DashboardResponse:
    rows: Sequence[EnrichedSnapshot]
    dataset: Dataset
    start_quarter: str | None
    end_quarter: str | None
    latest_quarter: str | None
    all_quarters: Sequence[str]
    entity: str | None
    cached: bool

    @property
    def count(self) -> int:
        return len(self.rows)


@dataclass(slots=True, frozen=True)
class NarrativeResult:
    quarter: str
    entity: str
    kind: str
    text: str
    cached: bool
    generated_at: str
