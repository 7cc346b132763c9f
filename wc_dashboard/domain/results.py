"""Derived views produced by the dataset aggregator."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .models import Entity, EnrichedSnapshot, TurnoverMetrics


@dataclass(frozen=True)
class CompositionShare:
    entity: Entity
    working_capital: Decimal
    share_percent: Decimal


@dataclass(frozen=True)
class YoYDelta:
    """Period-over-period change of one measure.

    ``percent_change`` is 0 whenever the prior value is 0; inspect
    ``has_prior`` and the absolute values to tell "new" from "flat".
    """

    entity: Entity
    measure: str
    current_quarter: str
    prior_quarter: str | None
    current_value: Decimal
    prior_value: Decimal
    percent_change: Decimal
    has_current: bool
    has_prior: bool

    @property
    def absolute_change(self) -> Decimal:
        return self.current_value - self.prior_value


@dataclass(frozen=True)
class TrendPoint:
    quarter: str
    working_capital: Decimal
    metrics: TurnoverMetrics
    present: bool
    row: EnrichedSnapshot | None = None
