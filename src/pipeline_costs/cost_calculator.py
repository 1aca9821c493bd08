"""Per-operation billed duration and estimated cost."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Iterable, Optional

import structlog

from pipeline_costs.config import (
    MIN_BILLED_SECONDS,
    OPERATION_NAME_LENGTH,
    OPERATION_NAME_PREFIX,
    SECONDS_PER_HOUR,
    UNKNOWN_COST,
)
from pipeline_costs.operations import FieldState, OperationRecord
from pipeline_costs.price_table import PriceTable

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ReportRow:
    """One report line. Duration fields are None when the end time is invalid."""

    name: str
    machine_type: str
    duration: Optional[timedelta]
    hourly_price_usd: Optional[float]
    billed_hours: Optional[float]
    cost: str
    running: bool

    @property
    def cost_usd(self) -> Optional[float]:
        if self.cost == UNKNOWN_COST:
            return None
        return float(self.cost)


def short_operation_name(name: str) -> str:
    if name.startswith(OPERATION_NAME_PREFIX):
        name = name[len(OPERATION_NAME_PREFIX):]
    return name[:OPERATION_NAME_LENGTH]


def clamp_billed_duration(duration: timedelta) -> timedelta:
    """Apply the one-minute minimum billing increment; longer runs are unchanged."""
    minimum = timedelta(seconds=MIN_BILLED_SECONDS)
    if duration < minimum:
        return minimum
    return duration


def billed_hours(duration: timedelta) -> float:
    return duration.total_seconds() / SECONDS_PER_HOUR


def format_cost(value: float) -> str:
    # Shortest round-trip digits, never scientific notation.
    return format(Decimal(repr(value)), "f")


def format_duration(duration: timedelta) -> str:
    """Render as e.g. `1h2m3.5s`, `4m0s` or `0s`."""
    total = duration.total_seconds()
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, remainder = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, 60)
    seconds_text = format(Decimal(repr(round(seconds, 6))).normalize(), "f")
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{seconds_text}s")
    return sign + "".join(parts)


def calculate_row(
    operation: OperationRecord,
    price_table: PriceTable,
    now: Clock = utc_now,
) -> ReportRow | None:
    """Build the report row for one operation, or None if it is filtered.

    Operations without a usable start time are filtered. An operation with no
    end time is still running and is billed up to `now()`. An invalid end time
    keeps the row but leaves duration, hours and cost unknown.
    """
    if not operation.start_time.is_present:
        if operation.start_time.state is FieldState.INVALID:
            logger.warning("operation_skipped_invalid_start", operation=operation.name)
        return None

    machine_type = operation.machine_type.value if operation.machine_type.is_present else ""
    hourly = price_table.lookup(machine_type) if machine_type else None
    running = operation.end_time.state is FieldState.ABSENT

    if operation.end_time.state is FieldState.INVALID:
        return ReportRow(
            name=short_operation_name(operation.name),
            machine_type=machine_type,
            duration=None,
            hourly_price_usd=hourly,
            billed_hours=None,
            cost=UNKNOWN_COST,
            running=False,
        )

    start = operation.start_time.value
    end = now() if running else operation.end_time.value
    duration = clamp_billed_duration(end - start)
    hours = billed_hours(duration)

    if hourly is None:
        if machine_type:
            logger.info("machine_type_not_priced", operation=operation.name, machine_type=machine_type)
        cost = UNKNOWN_COST
    else:
        cost = format_cost(hours * hourly)

    return ReportRow(
        name=short_operation_name(operation.name),
        machine_type=machine_type,
        duration=duration,
        hourly_price_usd=hourly,
        billed_hours=hours,
        cost=cost,
        running=running,
    )


def calculate_rows(
    operations: Iterable[OperationRecord],
    price_table: PriceTable,
    now: Clock = utc_now,
) -> list[ReportRow]:
    """Rows in source order, with filtered operations dropped."""
    rows: list[ReportRow] = []
    for operation in operations:
        row = calculate_row(operation, price_table, now=now)
        if row is not None:
            rows.append(row)
    return rows
