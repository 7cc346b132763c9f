"""Working-capital turnover analytics for quarterly entity data."""
from wc_dashboard.application.use_cases import (
    BuildPriorityIssuesUseCase,
    DashboardContext,
    LoadDashboardUseCase,
)
from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import Entity, EntitySnapshot, TurnoverMetrics
from wc_dashboard.domain.priority import Priority, PriorityScorer, ScoringPolicy
from wc_dashboard.domain.services import DatasetAggregator
from wc_dashboard.domain.turnover import TurnoverCalculator

__all__ = [
    "BuildPriorityIssuesUseCase",
    "DashboardContext",
    "LoadDashboardUseCase",
    "Dataset",
    "Entity",
    "EntitySnapshot",
    "TurnoverMetrics",
    "Priority",
    "PriorityScorer",
    "ScoringPolicy",
    "DatasetAggregator",
    "TurnoverCalculator",
]
