from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from pipeline_costs.operations_source import StaticOperationsSource
from pipeline_costs.price_table import PriceTable

FIXED_NOW = datetime(2017, 12, 12, 20, 0, 0, tzinfo=timezone.utc)


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def _raw_operation(
    name: str,
    start: datetime | None,
    end: datetime | None,
    machine_type: str | None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    if start is not None:
        metadata["startTime"] = _iso(start)
    if end is not None:
        metadata["endTime"] = _iso(end)
    if machine_type is not None:
        metadata["runtimeMetadata"] = {"computeEngine": {"machineType": machine_type}}
    return {"name": name, "metadata": metadata}


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def price_table() -> PriceTable:
    return PriceTable(
        prices={"us-a/f1-micro": 0.0076, "us-central1-f/n1-standard-1": 0.0475},
        machine_types={"f1-micro": 1, "n1-standard-1": 1},
        catalog_version="test",
    )


@pytest.fixture
def raw_operations() -> list[dict[str, Any]]:
    start = FIXED_NOW - timedelta(hours=2)
    return [
        _raw_operation("operations/AAAAAAAAAAAAAAAA", start, start + timedelta(seconds=45), "us-a/f1-micro"),
        _raw_operation(
            "operations/BBBBBBBBBBBBBBBB",
            start,
            start + timedelta(hours=1),
            "us-central1-f/n1-standard-1",
        ),
        _raw_operation("operations/CCCCCCCCCCCCCCCC", None, None, "us-a/f1-micro"),
        _raw_operation("operations/DDDDDDDDDDDDDDDD", start, None, "us-a/custom-4-16384"),
    ]


@pytest.fixture
def operations_source(raw_operations: list[dict[str, Any]]) -> StaticOperationsSource:
    return StaticOperationsSource({"my-project": raw_operations})
