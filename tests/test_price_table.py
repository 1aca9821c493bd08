from __future__ import annotations

import json
from typing import Any

import pytest
from structlog.testing import capture_logs

from pipeline_costs.catalog import RawCatalog, load_raw_catalog, parse_raw_catalog
from pipeline_costs.config import REGIONS, ZONES
from pipeline_costs.price_table import (
    PriceTable,
    build_price_table,
    composite_key,
    machine_type_from_key,
)


def _catalog(entries: dict[str, Any]) -> RawCatalog:
    return parse_raw_catalog(json.dumps({"version": "test", "gcp_price_list": entries}))


def test_f1_micro_prices_every_zone_of_us() -> None:
    table = build_price_table(_catalog({"CP-COMPUTEENGINE-VMIMAGE-F1-MICRO": {"us": 0.0076}}))
    assert table.lookup("us-a/f1-micro") == 0.0076
    assert table.lookup("us-f/f1-micro") == 0.0076
    assert len(table) == 6


def test_key_count_is_matched_regions_times_zones() -> None:
    table = build_price_table(
        _catalog(
            {
                "CP-COMPUTEENGINE-VMIMAGE-N1-STANDARD-1": {
                    "us": 0.0475,
                    "us-east4": 0.0535,
                    "europe-west2": 0.0612,
                    "southamerica-east1": 0.0754,
                    "cores": "1",
                    "memory": "3.75",
                    "ssd": [0, 1, 2],
                }
            }
        )
    )
    assert len(table) == 3 * len(ZONES)
    assert table.machine_types["n1-standard-1"] == 3
    assert "southamerica-east1-a/n1-standard-1" not in table
    assert all(table.lookup(f"us-east4-{zone}/n1-standard-1") == 0.0535 for zone in ZONES)


def test_bundled_catalog_zone_prices_are_region_prices() -> None:
    catalog = load_raw_catalog()
    table = build_price_table(catalog)
    assert table.catalog_version == "v1.21"
    assert table.lookup("us-central1-f/n1-standard-1") == 0.0475
    assert "f1-micro" in table.machine_types
    for machine_type, matched in table.machine_types.items():
        entry = catalog.entries["CP-COMPUTEENGINE-VMIMAGE-" + machine_type.upper()]
        regions = [region for region in REGIONS if region in entry.fields]
        assert matched == len(regions)
        for region in regions:
            prices = {table.lookup(composite_key(region, zone, machine_type)) for zone in ZONES}
            assert prices == {float(entry.fields[region])}


def test_non_numeric_region_fields_are_skipped() -> None:
    table = build_price_table(
        _catalog(
            {
                "CP-COMPUTEENGINE-VMIMAGE-X1": {
                    "us": "0.5",
                    "asia": True,
                    "australia": None,
                    "europe-west1": -1.0,
                    "europe": 0.1,
                }
            }
        )
    )
    assert sorted(table.prices) == sorted(f"europe-{zone}/x1" for zone in ZONES)
    assert table.machine_types["x1"] == 1


def test_malformed_vm_entry_does_not_abort_build() -> None:
    table = build_price_table(
        _catalog(
            {
                "CP-COMPUTEENGINE-VMIMAGE-BROKEN": [0.1, 0.2],
                "CP-COMPUTEENGINE-VMIMAGE-ALSO-BROKEN": 0.3,
                "CP-COMPUTEENGINE-VMIMAGE-G1-SMALL": {"us": 0.0257},
            }
        )
    )
    assert table.machine_types["broken"] == 0
    assert table.machine_types["also-broken"] == 0
    assert table.lookup("us-c/g1-small") == 0.0257
    assert not any(key.endswith("/broken") for key in table.prices)


def test_non_vm_entries_are_ignored() -> None:
    table = build_price_table(
        _catalog(
            {
                "sustained_use_base": 0.25,
                "CP-BIGSTORE-STORAGE": {"us": 0.026},
                "CP-COMPUTEENGINE-LOCAL-SSD": {"us": 0.08},
            }
        )
    )
    assert len(table) == 0
    assert dict(table.machine_types) == {}


def test_entry_without_recognized_regions_has_no_lookup_price() -> None:
    table = build_price_table(_catalog({"CP-COMPUTEENGINE-VMIMAGE-NEW-TYPE": {"mars": 1.0}}))
    assert table.machine_types["new-type"] == 0
    assert table.lookup("new-type") is None
    assert len(table) == 0


def test_custom_regions_and_zones() -> None:
    table = build_price_table(
        _catalog({"CP-COMPUTEENGINE-VMIMAGE-F1-MICRO": {"us": 0.0076, "europe": 0.0086}}),
        regions=["europe"],
        zones=["b", "d"],
    )
    assert sorted(table.prices) == ["europe-b/f1-micro", "europe-d/f1-micro"]


def test_price_table_is_read_only() -> None:
    table = PriceTable(prices={"us-a/f1-micro": 0.0076})
    with pytest.raises(TypeError):
        table.prices["us-a/f1-micro"] = 1.0  # type: ignore[index]
    assert table.sorted_items() == [("us-a/f1-micro", 0.0076)]


def test_machine_type_from_key() -> None:
    assert machine_type_from_key("CP-COMPUTEENGINE-VMIMAGE-N1-HIGHMEM-2") == "n1-highmem-2"
    assert machine_type_from_key("CP-COMPUTEENGINE-STORAGE-PD-SSD") is None


def _events(logs: list[dict[str, Any]]) -> list[str]:
    return [entry["event"] for entry in logs if entry.get("log_level") == "warning"]


def test_non_numeric_region_value_logs_warning() -> None:
    with capture_logs() as logs:
        build_price_table(_catalog({"CP-COMPUTEENGINE-VMIMAGE-X1": {"us": "0.5", "europe": 0.1}}))
    warnings = [entry for entry in logs if entry["event"] == "catalog_region_price_not_numeric"]
    assert len(warnings) == 1
    assert warnings[0]["log_level"] == "warning"
    assert warnings[0]["catalog_key"] == "CP-COMPUTEENGINE-VMIMAGE-X1"
    assert warnings[0]["region"] == "us"


def test_malformed_entry_and_uncovered_machine_type_log_warnings() -> None:
    with capture_logs() as logs:
        table = build_price_table(
            _catalog(
                {
                    "CP-COMPUTEENGINE-VMIMAGE-BROKEN": [0.1, 0.2],
                    "CP-COMPUTEENGINE-VMIMAGE-NEW-TYPE": {"mars": 1.0},
                    "CP-COMPUTEENGINE-VMIMAGE-G1-SMALL": {"us": 0.0257},
                }
            )
        )
    assert table.lookup("us-a/g1-small") == 0.0257
    events = _events(logs)
    assert "catalog_entry_not_object" in events
    assert "catalog_machine_types_without_regions" in events
    uncovered = next(
        entry for entry in logs if entry["event"] == "catalog_machine_types_without_regions"
    )
    assert uncovered["machine_types"] == ["broken", "new-type"]


def test_well_formed_catalog_logs_no_warnings() -> None:
    with capture_logs() as logs:
        build_price_table(_catalog({"CP-COMPUTEENGINE-VMIMAGE-F1-MICRO": {"us": 0.0076}}))
    assert _events(logs) == []
