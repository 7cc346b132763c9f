"""Hand-off to the narrative generator, with a cache-through analysis store.

The generator itself (prompt text, model client, retries) lives outside this
package; it only receives the plain data built here.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol, Sequence

from wc_dashboard.application.dto import NarrativeResult
from wc_dashboard.config import Settings
from wc_dashboard.domain.analysis.entities import CachedAnalysis
from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import Entity
from wc_dashboard.domain.priority import PriorityIssue
from wc_dashboard.domain.quarters import QuarterLike, parse
from wc_dashboard.domain.repositories import AnalysisStore
from wc_dashboard.domain.services import DatasetAggregator
from wc_dashboard.infrastructure.storage.analysis_store import FileSystemAnalysisStore

logger = logging.getLogger(__name__)

NARRATIVE_KINDS = ("overview", "turnover", "trend", "action")


class NarrativeGenerator(Protocol):
    def generate(self, kind: str, payload: dict[str, Any]) -> str:
        ...


def _number(value: Decimal, places: int = 1) -> float:
    return round(float(value), places)


def issue_to_dict(issue: PriorityIssue) -> dict[str, Any]:
    return {
        "entity": issue.entity.value,
        "category": issue.category.value,
        "change_rate_percent": _number(issue.change_rate_percent),
        "days_impact": _number(issue.days_impact, 0),
        "entity_weight_percent": _number(issue.entity_weight_percent),
        "score": issue.score,
        "priority": issue.priority.value,
        "current_value": _number(issue.current_value),
        "prior_value": _number(issue.prior_value),
    }


def build_narrative_payload(
    aggregator: DatasetAggregator,
    dataset: Dataset,
    quarter: QuarterLike,
    entity: "str | Entity" = Entity.CONSOLIDATED,
    trend_quarters: Sequence[str] | None = None,
    issues: Sequence[PriorityIssue] = (),
) -> dict[str, Any]:
    """Plain, JSON-serialisable view of one quarter for one entity."""
    label = str(parse(quarter))
    target = Entity.parse(entity)
    if trend_quarters is None:
        trend_quarters = [q for q in dataset.quarters() if parse(q) <= parse(label)]

    yoy = {
        measure: aggregator.yoy_delta(dataset, label, target, measure)
        for measure in ("working_capital", "receivables", "inventory", "payables", "dso", "dio", "dpo", "ccc")
    }
    return {
        "quarter": label,
        "entity": target.value,
        "composition": [
            {
                "entity": share.entity.value,
                "working_capital": _number(share.working_capital),
                "share_percent": _number(share.share_percent),
            }
            for share in aggregator.composition(dataset, label)
        ],
        "yoy": {
            measure: {
                "current": _number(delta.current_value),
                "prior": _number(delta.prior_value),
                "percent_change": _number(delta.percent_change),
                "has_prior": delta.has_prior,
            }
            for measure, delta in yoy.items()
        },
        "trend": [
            {
                "quarter": point.quarter,
                "working_capital": _number(point.working_capital),
                "dso": point.metrics.dso,
                "dio": point.metrics.dio,
                "dpo": point.metrics.dpo,
                "ccc": point.metrics.ccc,
                "present": point.present,
            }
            for point in aggregator.trend_series(dataset, target, trend_quarters)
        ],
        "issues": [issue_to_dict(issue) for issue in issues],
    }


def build_analysis_store(settings: Settings) -> AnalysisStore:
    return FileSystemAnalysisStore(settings.analysis_cache_dir)


class GenerateNarrativeUseCase:
    def __init__(self, store: AnalysisStore, generator: NarrativeGenerator) -> None:
        self._store = store
        self._generator = generator

    def execute(
        self,
        quarter: QuarterLike,
        kind: str,
        payload: dict[str, Any],
        entity: "str | Entity" = Entity.CONSOLIDATED,
        force: bool = False,
    ) -> NarrativeResult:
        if kind not in NARRATIVE_KINDS:
            raise ValueError(f"Unknown narrative kind {kind!r}; expected one of {', '.join(NARRATIVE_KINDS)}")
        label = str(parse(quarter))
        entity_key = Entity.parse(entity).value

        if not force:
            cached = self._store.get(label, entity_key, kind)
            if cached is not None:
                logger.info("Using cached %s narrative for %s/%s", kind, label, entity_key)
                return self._result(cached, cached=True)

        logger.info("Generating %s narrative for %s/%s", kind, label, entity_key)
        text = self._generator.generate(kind, payload)
        stored = self._store.put(
            CachedAnalysis(
                quarter=label,
                entity=entity_key,
                kind=kind,
                content=text,
                generated_at=datetime.now(timezone.utc),
            )
        )
        return self._result(stored, cached=False)

    def invalidate(self, quarter: QuarterLike, entity: "str | Entity | None" = None) -> int:
        """Drop cached narratives for a quarter, or only one entity's."""
        key = Entity.parse(entity).value if entity is not None else None
        removed = self._store.delete(str(parse(quarter)), key)
        logger.info("Removed %d cached narrative(s) for %s", removed, quarter)
        return removed

    @staticmethod
    def _result(analysis: CachedAnalysis, cached: bool) -> NarrativeResult:
        return NarrativeResult(
            quarter=analysis.quarter,
            entity=analysis.entity,
            kind=analysis.kind,
            text=analysis.content,
            cached=cached,
            generated_at=analysis.generated_at.isoformat(),
        )
