"""Analysis cache entities for generated narratives."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CachedAnalysis:
    quarter: str
    entity: str
    kind: str
    content: str
    generated_at: datetime

    @property
    def slot(self) -> str:
        return f"{self.entity}/{self.kind}"
