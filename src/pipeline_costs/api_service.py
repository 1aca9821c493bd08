"""Service-layer handlers for the cost dashboard endpoints."""

from __future__ import annotations

import html
import os
from datetime import datetime, timezone

import structlog

from pipeline_costs.api_models import (
    CostReportResponse,
    PriceEntry,
    PriceTableResponse,
    ReportRowModel,
)
from pipeline_costs.config import PROJECT_ENV, PROJECT_FALLBACK_ENV, UNKNOWN_COST
from pipeline_costs.cost_calculator import (
    Clock,
    ReportRow,
    calculate_rows,
    format_cost,
    format_duration,
    utc_now,
)
from pipeline_costs.errors import ProjectNotConfiguredError
from pipeline_costs.operations import decode_operation
from pipeline_costs.operations_source import OperationsSource
from pipeline_costs.price_table import PriceTable

logger = structlog.get_logger(__name__)


def resolve_project(explicit: str | None = None) -> str:
    """Pick the project from the request, then PROJECT, then the runtime project."""
    candidates = (
        explicit,
        os.getenv(PROJECT_ENV),
        os.getenv(PROJECT_FALLBACK_ENV),
    )
    for candidate in candidates:
        value = (candidate or "").strip()
        if value:
            if value == "None":
                break
            return value
    raise ProjectNotConfiguredError("no project found")


def _price_entries(price_table: PriceTable) -> list[PriceEntry]:
    return [
        PriceEntry(key=key, hourly_price_usd=price)
        for key, price in price_table.sorted_items()
    ]


def _row_model(row: ReportRow) -> ReportRowModel:
    return ReportRowModel(
        name=row.name,
        machine_type=row.machine_type,
        duration_seconds=row.duration.total_seconds() if row.duration is not None else None,
        duration_display=format_duration(row.duration) if row.duration is not None else UNKNOWN_COST,
        hourly_price_usd=row.hourly_price_usd,
        billed_hours=row.billed_hours,
        cost=row.cost,
        running=row.running,
    )


def run_price_table(price_table: PriceTable) -> PriceTableResponse:
    entries = _price_entries(price_table)
    return PriceTableResponse(
        prices=entries,
        total=len(entries),
        catalog_version=price_table.catalog_version,
        catalog_updated=price_table.catalog_updated,
    )


def run_cost_report(
    project: str,
    source: OperationsSource,
    price_table: PriceTable,
    now: Clock = utc_now,
) -> CostReportResponse:
    """List, decode and price the project's operations.

    Source failures and undecodable primary metadata propagate; there is no
    partial report.
    """
    raw_operations = source.list_operations(project)
    operations = [decode_operation(raw) for raw in raw_operations]
    rows = calculate_rows(operations, price_table, now=now)

    known = [row.cost_usd for row in rows if row.cost != UNKNOWN_COST]
    unknown_count = len(rows) - len(known)
    logger.info(
        "cost_report_built",
        project=project,
        operations=len(raw_operations),
        rows=len(rows),
        unknown_costs=unknown_count,
    )
    return CostReportResponse(
        project=project,
        rows=[_row_model(row) for row in rows],
        prices=_price_entries(price_table),
        total_known_cost_usd=sum(value for value in known if value is not None),
        unknown_cost_count=unknown_count,
        generated_at_utc=datetime.now(timezone.utc).isoformat(),
        catalog_version=price_table.catalog_version,
    )


def _format_hours(value: float | None) -> str:
    return UNKNOWN_COST if value is None else format_cost(value)


def render_report_html(report: CostReportResponse) -> str:
    """Render the operations and prices tables as a standalone page."""
    escaped_project = html.escape(report.project)
    parts = [
        "<!doctype html>",
        '<html lang="en"><head><meta charset="utf-8" />'
        f"<title>Pipelines Cost Dashboard: {escaped_project}</title>",
        "<style>"
        "body{font-family:Arial,sans-serif;padding:24px;line-height:1.4}"
        "table{border-collapse:collapse;margin:8px 0 24px 0} th,td{border:1px solid #ccc;padding:4px 10px;text-align:left}"
        ".unknown{color:#999}"
        "</style></head><body>",
        f'<h1>Google Pipelines Cost Dashboard for Project "{escaped_project}"</h1>',
        "<h2>Operations</h2>",
        "<table><thead><tr>"
        "<th>Name</th><th>Duration</th><th>Machine Type</th><th>Hours Billed</th><th>Cost</th>"
        "</tr></thead><tbody>",
    ]
    for row in report.rows:
        cost_class = ' class="unknown"' if row.cost == UNKNOWN_COST else ""
        parts.append(
            "<tr>"
            f"<td>{html.escape(row.name)}</td>"
            f"<td>{html.escape(row.duration_display)}</td>"
            f"<td>{html.escape(row.machine_type)}</td>"
            f"<td>{_format_hours(row.billed_hours)}</td>"
            f"<td{cost_class}>{html.escape(row.cost)}</td>"
            "</tr>"
        )
    parts.append("</tbody></table>")

    parts.append("<h2>Prices</h2>")
    parts.append("<table><thead><tr><th>machine</th><th>hourly price</th></tr></thead><tbody>")
    parts.extend(
        f"<tr><td>{html.escape(entry.key)}</td><td>{format_cost(entry.hourly_price_usd)}</td></tr>"
        for entry in report.prices
    )
    parts.append("</tbody></table>")
    parts.append("</body></html>")
    return "".join(parts)
