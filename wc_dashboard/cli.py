"""Command-line entrypoint for the working-capital dashboard."""
from __future__ import annotations

import argparse
import logging
import sys

from wc_dashboard.application.dto import DashboardRequest
from wc_dashboard.application.use_cases import (
    BuildPriorityIssuesUseCase,
    DashboardContext,
    LoadDashboardUseCase,
    build_aggregator,
    summarize_issues,
)
from wc_dashboard.config import DEFAULT_ENTITY_FILTER, SETTINGS
from wc_dashboard.domain.errors import UploadError, WcDashboardError
from wc_dashboard.domain.priority import Priority
from wc_dashboard.domain.quarters import format_quarter
from wc_dashboard.infrastructure.cache.dataset_cache import DatasetCache
from wc_dashboard.infrastructure.repositories.snapshot_repositories import repository_for

SAMPLE_SOURCE = "sample"


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Working-capital turnover report (DSO / DIO / DPO / CCC)")
    parser.add_argument("source", type=str, help="Path to .xlsx/.xls/.csv data, or 'sample' for bundled data")
    parser.add_argument("--start", type=str, help="First quarter to include (YY.NQ)")
    parser.add_argument("--end", type=str, help="Last quarter to include (YY.NQ)")
    parser.add_argument("--entity", type=str, default=DEFAULT_ENTITY_FILTER, help="Entity filter, 'all' for every entity")
    parser.add_argument("--issues", action="store_true", help="Rank adverse year-over-year changes")
    parser.add_argument("--quarter", type=str, help="Quarter to rank issues for (defaults to latest)")
    parser.add_argument(
        "--min-priority",
        type=str,
        choices=[p.value for p in Priority],
        default=Priority.LOW.value,
        help="Lowest priority to list",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = SETTINGS.sample_data_path if args.source == SAMPLE_SOURCE else args.source
    aggregator = build_aggregator(SETTINGS)
    context = DashboardContext(
        repository=repository_for(source),
        aggregator=aggregator,
        cache=DatasetCache(ttl_seconds=SETTINGS.cache_ttl_seconds),
    )

    try:
        response = LoadDashboardUseCase(context).execute(
            DashboardRequest(start_quarter=args.start, end_quarter=args.end, entity=args.entity)
        )
    except UploadError as exc:
        print(f"Error: {exc}")
        for detail in exc.details:
            print(f"  - {detail}")
        return 2
    except WcDashboardError as exc:
        print(f"Error: {exc}")
        return 2

    print("Working Capital Summary")
    print("=======================")
    print(f"Quarters: {format_quarter(response.start_quarter or '')} - {format_quarter(response.end_quarter or '')}")
    print(f"Entity filter: {response.entity or DEFAULT_ENTITY_FILTER}")
    print(f"Rows: {response.count}")
    print()
    print(f"{'quarter':<8}{'entity':<12}{'WC':>12}{'DSO':>6}{'DIO':>6}{'DPO':>6}{'CCC':>6}")
    for row in response.rows:
        metrics = row.metrics
        print(
            f"{str(row.quarter):<8}{row.entity.value:<12}{row.working_capital:>12,.0f}"
            f"{metrics.dso:>6}{metrics.dio:>6}{metrics.dpo:>6}{metrics.ccc:>6}"
        )

    if args.issues:
        quarter = args.quarter or response.latest_quarter
        if quarter is None:
            print("\nNo data to rank.")
            return 0
        try:
            issues = BuildPriorityIssuesUseCase(aggregator).execute(
                response.dataset, quarter, minimum=Priority(args.min_priority)
            )
        except WcDashboardError as exc:
            print(f"Error: {exc}")
            return 2
        counts = summarize_issues(issues)
        print(f"\nPriority issues for {format_quarter(quarter)}: " + ", ".join(f"{k} {v}" for k, v in counts.items()))
        if not issues:
            print("No adverse changes detected.")
        for issue in issues:
            print(
                f"- [{issue.priority.value}] {issue.entity.value} {issue.category.value}: "
                f"{issue.change_rate_percent:+.1f}% YoY, {issue.days_impact:+.0f} days, "
                f"weight {issue.entity_weight_percent:.1f}% (score {issue.score})"
            )

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
