from decimal import Decimal

import pytest

from wc_dashboard.domain.errors import InvalidQuarterFormat, InvalidSnapshot
from wc_dashboard.domain.models import Entity, EntitySnapshot
from wc_dashboard.domain.turnover import (
    BASIS_ESTIMATED,
    BASIS_QUARTERLY,
    BASIS_YTD,
    TurnoverCalculator,
    calc_turnover,
)


def make_snapshot(quarter="25.3Q", **overrides) -> EntitySnapshot:
    fields = dict(
        quarter=quarter,
        entity=Entity.DOMESTIC,
        quarterly_revenue=1000,
        receivables=100,
        inventory=240,
        payables=480,
    )
    fields.update(overrides)
    return EntitySnapshot.create(**fields)


def test_ytd_basis_takes_precedence():
    snapshot = make_snapshot(
        entity=Entity.CONSOLIDATED,
        quarterly_revenue=474257,
        quarterly_cogs=165303,
        ytd_revenue=1358744,
        ytd_cogs=461150,
        receivables=152793,
        inventory=414026,
        payables=158517,
    )

    metrics = calc_turnover(snapshot)

    assert metrics.revenue_basis == BASIS_YTD
    assert metrics.cogs_basis == BASIS_YTD
    assert round(metrics.annual_revenue, 2) == Decimal("1811658.67")
    assert metrics.dso == 31
    assert metrics.dio == 246
    assert metrics.dpo == 94
    assert metrics.ccc == 183


def test_quarterly_basis_and_estimated_cogs():
    metrics = calc_turnover(make_snapshot())

    assert metrics.revenue_basis == BASIS_QUARTERLY
    assert metrics.cogs_basis == BASIS_ESTIMATED
    assert metrics.annual_revenue == Decimal("4000")
    assert metrics.annual_cogs == Decimal("2400")
    # 365 * 100 / 4000 = 9.125
    assert metrics.dso == 9
    # 365 * 240 / 2400 = 36.5 rounds half up
    assert metrics.dio == 37
    assert metrics.dpo == 73


def test_negative_ccc_is_kept():
    metrics = calc_turnover(make_snapshot())

    assert metrics.ccc == metrics.dso + metrics.dio - metrics.dpo
    assert metrics.ccc == -27


def test_quarterly_cogs_used_before_estimate():
    metrics = calc_turnover(make_snapshot(quarterly_cogs=500, inventory=200))

    assert metrics.cogs_basis == BASIS_QUARTERLY
    assert metrics.annual_cogs == Decimal("2000")
    assert metrics.dio == 37


def test_ytd_cogs_used_without_ytd_revenue():
    metrics = calc_turnover(make_snapshot(quarter="25.2Q", ytd_cogs=1000, quarterly_cogs=900, inventory=200))

    assert metrics.revenue_basis == BASIS_QUARTERLY
    assert metrics.cogs_basis == BASIS_YTD
    assert metrics.annual_cogs == Decimal("2000")


def test_cogs_ratio_is_overridable():
    calculator = TurnoverCalculator(cogs_ratio=Decimal("0.5"))

    metrics = calculator.calculate(make_snapshot(inventory=100))

    assert calculator.cogs_ratio == Decimal("0.5")
    assert metrics.annual_cogs == Decimal("2000")
    assert metrics.dio == 18


def test_zero_balance_gives_zero_days():
    assert calc_turnover(make_snapshot(receivables=0)).dso == 0
    assert calc_turnover(make_snapshot(receivables=0, quarterly_revenue=0)).dso == 0


def test_zero_revenue_with_balance_gives_zero_days():
    metrics = calc_turnover(make_snapshot(quarterly_revenue=0, receivables=100, inventory=50, payables=20))

    assert (metrics.dso, metrics.dio, metrics.dpo, metrics.ccc) == (0, 0, 0, 0)


def test_malformed_quarter_fails_instead_of_defaulting():
    with pytest.raises(InvalidQuarterFormat):
        make_snapshot(quarter="25.Q3")


def test_negative_balance_rejected():
    with pytest.raises(InvalidSnapshot):
        make_snapshot(payables=-1)


def test_working_capital_is_derived():
    snapshot = make_snapshot(receivables=100, inventory=240, payables=480)

    assert snapshot.working_capital == Decimal("-140")
