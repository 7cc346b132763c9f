"""Domain services aggregating snapshots into dashboard views."""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable, Sequence, TypeVar, Union

from .dataset import Dataset
from .models import ZERO, EnrichedSnapshot, Entity, EntitySnapshot, TurnoverMetrics
from .quarters import QuarterLike, compare, parse, previous_quarter, year_ago
from .results import CompositionShare, TrendPoint, YoYDelta
from .turnover import TurnoverCalculator

ALL_ENTITIES = "all"
HUNDRED = Decimal("100")

Row = TypeVar("Row", EntitySnapshot, EnrichedSnapshot)

_SNAPSHOT_MEASURES: dict[str, Callable[[EntitySnapshot], Decimal]] = {
    "working_capital": lambda s: s.working_capital,
    "receivables": lambda s: s.receivables,
    "inventory": lambda s: s.inventory,
    "payables": lambda s: s.payables,
    "revenue": lambda s: s.quarterly_revenue,
}
_METRIC_MEASURES: dict[str, Callable[[TurnoverMetrics], int]] = {
    "dso": lambda m: m.dso,
    "dio": lambda m: m.dio,
    "dpo": lambda m: m.dpo,
    "ccc": lambda m: m.ccc,
}
MEASURES = tuple(_SNAPSHOT_MEASURES) + tuple(_METRIC_MEASURES)


def percent_change(current: Decimal, prior: Decimal) -> Decimal:
    if prior == 0:
        return ZERO
    return (current - prior) / prior * HUNDRED


def share_percent(part: Decimal, total: Decimal) -> Decimal:
    if total == 0:
        return ZERO
    return part / total * HUNDRED


class DatasetAggregator:
    """Bulk, order-preserving operations over a :class:`Dataset`."""

    def __init__(self, calculator: TurnoverCalculator | None = None) -> None:
        self._calculator = calculator or TurnoverCalculator()

    @property
    def calculator(self) -> TurnoverCalculator:
        return self._calculator

    def enrich(
        self, snapshots: Iterable[Union[EntitySnapshot, EnrichedSnapshot]]
    ) -> tuple[EnrichedSnapshot, ...]:
        enriched: list[EnrichedSnapshot] = []
        for item in snapshots:
            snapshot = item.snapshot if isinstance(item, EnrichedSnapshot) else item
            enriched.append(EnrichedSnapshot(snapshot=snapshot, metrics=self._calculator.calculate(snapshot)))
        return tuple(enriched)

    def filter_by_range(
        self,
        rows: Iterable[Row],
        start: QuarterLike,
        end: QuarterLike,
        entity: "str | Entity | None" = None,
    ) -> list[Row]:
        start_q, end_q = parse(start), parse(end)
        target = self._entity_filter(entity)
        return [
            row
            for row in rows
            if compare(start_q, row.quarter) <= 0
            and compare(row.quarter, end_q) <= 0
            and (target is None or row.entity is target)
        ]

    def composition(self, dataset: Dataset, quarter: QuarterLike) -> list[CompositionShare]:
        members = [s for s in dataset.for_quarter(quarter) if not s.entity.is_consolidated]
        total = sum((s.working_capital for s in members), ZERO)
        return [
            CompositionShare(
                entity=s.entity,
                working_capital=s.working_capital,
                share_percent=share_percent(s.working_capital, total),
            )
            for s in members
        ]

    def entity_weight(self, dataset: Dataset, quarter: QuarterLike, entity: "str | Entity") -> Decimal:
        """Entity working capital as a percentage of the consolidated figure."""
        snapshot = dataset.get(quarter, entity)
        consolidated = dataset.get(quarter, Entity.CONSOLIDATED)
        if snapshot is None or consolidated is None:
            return ZERO
        return share_percent(snapshot.working_capital, consolidated.working_capital)

    def yoy_delta(
        self,
        dataset: Dataset,
        quarter: QuarterLike,
        entity: "str | Entity",
        measure: str = "working_capital",
    ) -> YoYDelta:
        return self._delta(dataset, quarter, year_ago(quarter), entity, measure)

    def qoq_delta(
        self,
        dataset: Dataset,
        quarter: QuarterLike,
        entity: "str | Entity",
        measure: str = "working_capital",
    ) -> YoYDelta:
        return self._delta(dataset, quarter, previous_quarter(quarter), entity, measure)

    def trend_series(
        self,
        dataset: Dataset,
        entity: "str | Entity",
        quarters: Sequence[QuarterLike],
    ) -> list[TrendPoint]:
        target = Entity.parse(entity)
        points: list[TrendPoint] = []
        for label in quarters:
            quarter = parse(label)
            snapshot = dataset.get(quarter, target)
            if snapshot is None:
                points.append(
                    TrendPoint(
                        quarter=str(quarter),
                        working_capital=ZERO,
                        metrics=TurnoverMetrics.zero(),
                        present=False,
                    )
                )
                continue
            row = self.enrich([snapshot])[0]
            points.append(
                TrendPoint(
                    quarter=str(quarter),
                    working_capital=snapshot.working_capital,
                    metrics=row.metrics,
                    present=True,
                    row=row,
                )
            )
        return points

    def _delta(
        self,
        dataset: Dataset,
        quarter: QuarterLike,
        prior_label: str | None,
        entity: "str | Entity",
        measure: str,
    ) -> YoYDelta:
        extract = self._measure(measure)
        target = Entity.parse(entity)
        current_q = parse(quarter)
        current = dataset.get(current_q, target)
        prior = dataset.get(prior_label, target) if prior_label is not None else None
        current_value = extract(current) if current is not None else ZERO
        prior_value = extract(prior) if prior is not None else ZERO
        return YoYDelta(
            entity=target,
            measure=measure,
            current_quarter=str(current_q),
            prior_quarter=prior_label,
            current_value=current_value,
            prior_value=prior_value,
            percent_change=percent_change(current_value, prior_value),
            has_current=current is not None,
            has_prior=prior is not None,
        )

    def _measure(self, measure: str) -> Callable[[EntitySnapshot], Decimal]:
        if measure in _SNAPSHOT_MEASURES:
            return _SNAPSHOT_MEASURES[measure]
        if measure in _METRIC_MEASURES:
            metric = _METRIC_MEASURES[measure]
            return lambda snapshot: Decimal(metric(self._calculator.calculate(snapshot)))
        raise ValueError(f"Unknown measure {measure!r}; expected one of {', '.join(MEASURES)}")

    @staticmethod
    def _entity_filter(entity: "str | Entity | None") -> Entity | None:
        if entity is None:
            return None
        if isinstance(entity, str) and entity.strip().lower() in ("", ALL_ENTITIES):
            return None
        return Entity.parse(entity)
