"""Priority scoring for adverse working-capital changes.

The scorer combines three signals (change rate, days impact and the
entity's share of consolidated working capital) into a bounded score.
It never looks at the sign of its inputs: callers drop improvements before
scoring.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Sequence

from .models import Entity

Band = tuple[float, int]


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return {"HIGH": 2, "MEDIUM": 1, "LOW": 0}[self.value]


class IssueCategory(str, Enum):
    INVENTORY = "inventory"
    RECEIVABLES = "receivables"


# (exclusive upper bound, points); the final band applies to everything above.
CHANGE_BANDS: tuple[Band, ...] = ((5, 10), (10, 15), (15, 20), (20, 25), (30, 30), (float("inf"), 40))
IMPACT_BANDS: tuple[Band, ...] = ((5, 5), (10, 10), (15, 15), (20, 20), (40, 25), (float("inf"), 30))
WEIGHT_BANDS: tuple[Band, ...] = ((5, 5), (10, 10), (20, 15), (30, 25), (40, 35), (float("inf"), 40))


@dataclass(frozen=True)
class ScoringPolicy:
    """Risk-tolerance constants; build a new instance to change them."""

    change_bands: Sequence[Band] = field(default=CHANGE_BANDS)
    impact_bands: Sequence[Band] = field(default=IMPACT_BANDS)
    weight_bands: Sequence[Band] = field(default=WEIGHT_BANDS)
    dampening_weight_threshold: float = 10
    dampening_cap: int = 70
    max_score: int = 100
    high_threshold: int = 80
    medium_threshold: int = 50


DEFAULT_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class PriorityIssue:
    entity: Entity
    category: IssueCategory
    change_rate_percent: Decimal
    days_impact: Decimal
    entity_weight_percent: Decimal
    score: int
    priority: Priority
    current_value: Decimal = Decimal("0")
    prior_value: Decimal = Decimal("0")


def band_points(value: float, bands: Sequence[Band]) -> int:
    for upper, points in bands:
        if value < upper:
            return points
    return bands[-1][1]


class PriorityScorer:
    def __init__(self, policy: ScoringPolicy | None = None) -> None:
        self._policy = policy or DEFAULT_POLICY

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    def score(self, change_rate_percent: object, days_impact: object, entity_weight_percent: object) -> int:
        policy = self._policy
        change = float(change_rate_percent)  # type: ignore[arg-type]
        impact = float(days_impact)  # type: ignore[arg-type]
        weight = float(entity_weight_percent)  # type: ignore[arg-type]

        total = (
            band_points(change, policy.change_bands)
            + band_points(impact, policy.impact_bands)
            + band_points(weight, policy.weight_bands)
        )
        if weight < policy.dampening_weight_threshold and total > policy.dampening_cap:
            total = policy.dampening_cap
        return min(total, policy.max_score)

    def bucket(self, score: int) -> Priority:
        if score >= self._policy.high_threshold:
            return Priority.HIGH
        if score >= self._policy.medium_threshold:
            return Priority.MEDIUM
        return Priority.LOW

    def build_issue(
        self,
        entity: Entity,
        category: IssueCategory,
        change_rate_percent: Decimal,
        days_impact: Decimal,
        entity_weight_percent: Decimal,
        current_value: Decimal = Decimal("0"),
        prior_value: Decimal = Decimal("0"),
    ) -> PriorityIssue:
        score = self.score(change_rate_percent, days_impact, entity_weight_percent)
        return PriorityIssue(
            entity=entity,
            category=category,
            change_rate_percent=Decimal(change_rate_percent),
            days_impact=Decimal(days_impact),
            entity_weight_percent=Decimal(entity_weight_percent),
            score=score,
            priority=self.bucket(score),
            current_value=current_value,
            prior_value=prior_value,
        )
