"""Application services orchestrating the dashboard workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from wc_dashboard.application.dto import DashboardRequest, DashboardResponse
from wc_dashboard.config import Settings
from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import Entity
from wc_dashboard.domain.priority import IssueCategory, Priority, PriorityIssue, PriorityScorer
from wc_dashboard.domain.quarters import QuarterLike, parse
from wc_dashboard.domain.repositories import SnapshotRepository
from wc_dashboard.domain.services import DatasetAggregator
from wc_dashboard.domain.turnover import TurnoverCalculator
from wc_dashboard.infrastructure.cache.dataset_cache import DatasetCache

logger = logging.getLogger(__name__)

# category -> (balance measure, days metric)
ISSUE_MEASURES: dict[IssueCategory, tuple[str, str]] = {
    IssueCategory.INVENTORY: ("inventory", "dio"),
    IssueCategory.RECEIVABLES: ("receivables", "dso"),
}


def build_aggregator(settings: Settings) -> DatasetAggregator:
    calculator = TurnoverCalculator(cogs_ratio=settings.cogs_ratio, context=settings.decimal_context)
    return DatasetAggregator(calculator)


@dataclass(slots=True)
class DashboardContext:
    repository: SnapshotRepository
    aggregator: DatasetAggregator
    cache: DatasetCache[Dataset]


class LoadDashboardUseCase:
    def __init__(self, context: DashboardContext) -> None:
        self._context = context

    def load_dataset(self) -> tuple[Dataset, bool]:
        def loader() -> Dataset:
            snapshots = self._context.repository.list_snapshots()
            logger.info("Loaded %d snapshots from repository", len(snapshots))
            return Dataset(snapshots).sorted()

        return self._context.cache.get_or_load(loader)

    def execute(self, request: DashboardRequest | None = None) -> DashboardResponse:
        request = request or DashboardRequest()
        dataset, cached = self.load_dataset()
        all_quarters = dataset.quarters()
        latest = dataset.latest_quarter()
        latest_label = str(latest) if latest is not None else None

        start = request.start_quarter or (all_quarters[0] if all_quarters else None)
        end = request.end_quarter or latest_label

        rows = self._context.aggregator.enrich(dataset)
        if start is not None and end is not None:
            rows = tuple(self._context.aggregator.filter_by_range(rows, start, end, request.entity))

        return DashboardResponse(
            rows=rows,
            dataset=dataset,
            start_quarter=str(parse(start)) if start is not None else None,
            end_quarter=str(parse(end)) if end is not None else None,
            latest_quarter=latest_label,
            all_quarters=all_quarters,
            entity=request.entity,
            cached=cached,
        )


class BuildPriorityIssuesUseCase:
    """Ranks adverse year-over-year inventory and receivables changes."""

    def __init__(self, aggregator: DatasetAggregator, scorer: PriorityScorer | None = None) -> None:
        self._aggregator = aggregator
        self._scorer = scorer or PriorityScorer()

    def execute(
        self,
        dataset: Dataset,
        quarter: QuarterLike,
        minimum: Priority = Priority.LOW,
    ) -> list[PriorityIssue]:
        issues: list[PriorityIssue] = []
        for entity in Entity.business_units():
            if dataset.get(quarter, entity) is None:
                continue
            weight = self._aggregator.entity_weight(dataset, quarter, entity)
            for category in IssueCategory:
                issue = self._build_issue(dataset, quarter, entity, category, weight)
                if issue is not None and issue.priority.rank >= minimum.rank:
                    issues.append(issue)

        entity_order = {entity: position for position, entity in enumerate(Entity)}
        issues.sort(key=lambda issue: (-issue.score, entity_order[issue.entity]))
        return issues

    def _build_issue(
        self,
        dataset: Dataset,
        quarter: QuarterLike,
        entity: Entity,
        category: IssueCategory,
        weight: Decimal,
    ) -> PriorityIssue | None:
        balance_measure, days_measure = ISSUE_MEASURES[category]
        balance = self._aggregator.yoy_delta(dataset, quarter, entity, balance_measure)
        if not balance.has_prior:
            return None
        days = self._aggregator.yoy_delta(dataset, quarter, entity, days_measure)
        days_impact = days.absolute_change
        if balance.percent_change <= 0 or days_impact <= 0:
            return None
        return self._scorer.build_issue(
            entity=entity,
            category=category,
            change_rate_percent=balance.percent_change,
            days_impact=days_impact,
            entity_weight_percent=weight,
            current_value=balance.current_value,
            prior_value=balance.prior_value,
        )


def summarize_issues(issues: Sequence[PriorityIssue]) -> dict[str, int]:
    counts = {priority.value: 0 for priority in Priority}
    for issue in issues:
        counts[issue.priority.value] += 1
    return counts
