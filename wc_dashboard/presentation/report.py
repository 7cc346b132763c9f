"""Tabular renderers for enriched snapshots and priority issues."""
from __future__ import annotations

import csv
import io
from decimal import Decimal
from html import escape
from typing import Sequence

import pandas as pd

from wc_dashboard.domain.models import EnrichedSnapshot
from wc_dashboard.domain.priority import PriorityIssue
from wc_dashboard.domain.results import CompositionShare, TrendPoint


def _amount(value: Decimal | None) -> str:
    return "" if value is None else str(value)


def snapshots_to_rows(rows: Sequence[EnrichedSnapshot]) -> list[dict[str, str]]:
    result: list[dict[str, str]] = []
    for row in rows:
        snapshot, metrics = row.snapshot, row.metrics
        result.append(
            {
                "quarter": str(snapshot.quarter),
                "entity": snapshot.entity.value,
                "revenue": _amount(snapshot.quarterly_revenue),
                "cogs": _amount(snapshot.quarterly_cogs),
                "ytd_revenue": _amount(snapshot.ytd_revenue),
                "ytd_cogs": _amount(snapshot.ytd_cogs),
                "receivables": _amount(snapshot.receivables),
                "inventory": _amount(snapshot.inventory),
                "payables": _amount(snapshot.payables),
                "working_capital": _amount(snapshot.working_capital),
                "dso": str(metrics.dso),
                "dio": str(metrics.dio),
                "dpo": str(metrics.dpo),
                "ccc": str(metrics.ccc),
                "revenue_basis": metrics.revenue_basis,
                "cogs_basis": metrics.cogs_basis,
            }
        )
    return result


def issues_to_rows(issues: Sequence[PriorityIssue]) -> list[dict[str, str]]:
    return [
        {
            "entity": issue.entity.value,
            "category": issue.category.value,
            "change_rate_percent": f"{issue.change_rate_percent:.1f}",
            "days_impact": f"{issue.days_impact:.0f}",
            "entity_weight_percent": f"{issue.entity_weight_percent:.1f}",
            "score": str(issue.score),
            "priority": issue.priority.value,
        }
        for issue in issues
    ]


def composition_to_rows(shares: Sequence[CompositionShare]) -> list[dict[str, str]]:
    return [
        {
            "entity": share.entity.value,
            "working_capital": _amount(share.working_capital),
            "share_percent": f"{share.share_percent:.1f}",
        }
        for share in shares
    ]


def trend_to_rows(points: Sequence[TrendPoint]) -> list[dict[str, str]]:
    return [
        {
            "quarter": point.quarter,
            "working_capital": _amount(point.working_capital),
            "dso": str(point.metrics.dso),
            "dio": str(point.metrics.dio),
            "dpo": str(point.metrics.dpo),
            "ccc": str(point.metrics.ccc),
        }
        for point in points
    ]


def render_csv(rows: Sequence[dict[str, str]], columns: Sequence[str] | None = None) -> bytes:
    if not rows:
        return b""
    fieldnames = list(columns or rows[0])
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(
    rows: Sequence[dict[str, str]],
    empty_message: str = "No data for the selected range.",
    title: str | None = None,
) -> str:
    heading = f"<h2>{escape(title)}</h2>" if title else ""
    if not rows:
        return f"{heading}<p>{escape(empty_message)}</p>"
    columns = list(rows[0])
    head = "".join(f"<th>{escape(column)}</th>" for column in columns)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(str(row.get(column, '')))}</td>" for column in columns) + "</tr>"
        for row in rows
    )
    return f"{heading}<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def rows_to_dataframe(rows: Sequence[EnrichedSnapshot]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "quarter": str(r.quarter),
                "entity": r.entity.value,
                "revenue": float(r.snapshot.quarterly_revenue),
                "receivables": float(r.snapshot.receivables),
                "inventory": float(r.snapshot.inventory),
                "payables": float(r.snapshot.payables),
                "working_capital": float(r.working_capital),
                "dso": r.metrics.dso,
                "dio": r.metrics.dio,
                "dpo": r.metrics.dpo,
                "ccc": r.metrics.ccc,
            }
            for r in rows
        ],
        columns=[
            "quarter",
            "entity",
            "revenue",
            "receivables",
            "inventory",
            "payables",
            "working_capital",
            "dso",
            "dio",
            "dpo",
            "ccc",
        ],
    )
