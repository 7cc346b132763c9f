"""Turnover metric derivation (DSO, DIO, DPO, CCC)."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal, getcontext, localcontext

from .models import EntitySnapshot, TurnoverMetrics
from .quarters import parse

# Assumed COGS / revenue ratio, used only when a snapshot has no COGS at all.
DEFAULT_COGS_RATIO = Decimal("0.60")
DAYS_IN_YEAR = Decimal("365")
QUARTERS_IN_YEAR = Decimal("4")

BASIS_YTD = "ytd"
BASIS_QUARTERLY = "quarterly"
BASIS_ESTIMATED = "estimated"


def annualize_ytd(ytd_value: Decimal, quarter_number: int) -> Decimal:
    return ytd_value / Decimal(quarter_number) * QUARTERS_IN_YEAR


def days_outstanding(balance: Decimal, annual_flow: Decimal) -> int:
    """Days of ``annual_flow`` tied up in ``balance``; 0 for empty inputs."""
    if balance <= 0 or annual_flow <= 0:
        return 0
    days = DAYS_IN_YEAR * balance / annual_flow
    return int(days.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class TurnoverCalculator:
    """Converts an :class:`EntitySnapshot` into :class:`TurnoverMetrics`.

    Year-to-date figures take precedence over the single-quarter figure
    because they smooth quarterly seasonality.
    """

    def __init__(self, cogs_ratio: Decimal | None = None, context: Context | None = None) -> None:
        if cogs_ratio is None:
            cogs_ratio = DEFAULT_COGS_RATIO
        self._cogs_ratio = Decimal(str(cogs_ratio))
        self._context = context

    @property
    def cogs_ratio(self) -> Decimal:
        return self._cogs_ratio

    def calculate(self, snapshot: EntitySnapshot) -> TurnoverMetrics:
        quarter_number = parse(snapshot.quarter).quarter_number
        with localcontext(self._context or getcontext()):
            return self._calculate(snapshot, quarter_number)

    def _calculate(self, snapshot: EntitySnapshot, quarter_number: int) -> TurnoverMetrics:
        if snapshot.ytd_revenue is not None:
            annual_revenue = annualize_ytd(snapshot.ytd_revenue, quarter_number)
            revenue_basis = BASIS_YTD
        else:
            annual_revenue = snapshot.quarterly_revenue * QUARTERS_IN_YEAR
            revenue_basis = BASIS_QUARTERLY

        if snapshot.ytd_cogs is not None:
            annual_cogs = annualize_ytd(snapshot.ytd_cogs, quarter_number)
            cogs_basis = BASIS_YTD
        elif snapshot.quarterly_cogs is not None:
            annual_cogs = snapshot.quarterly_cogs * QUARTERS_IN_YEAR
            cogs_basis = BASIS_QUARTERLY
        else:
            annual_cogs = annual_revenue * self._cogs_ratio
            cogs_basis = BASIS_ESTIMATED

        dso = days_outstanding(snapshot.receivables, annual_revenue)
        dio = days_outstanding(snapshot.inventory, annual_cogs)
        dpo = days_outstanding(snapshot.payables, annual_cogs)

        return TurnoverMetrics(
            dso=dso,
            dio=dio,
            dpo=dpo,
            ccc=dso + dio - dpo,
            annual_revenue=annual_revenue,
            annual_cogs=annual_cogs,
            revenue_basis=revenue_basis,
            cogs_basis=cogs_basis,
        )


def calc_turnover(snapshot: EntitySnapshot, cogs_ratio: Decimal | None = None) -> TurnoverMetrics:
    return TurnoverCalculator(cogs_ratio).calculate(snapshot)
