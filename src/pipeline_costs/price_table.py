"""Flat hourly VM price table built from the raw catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

import structlog

from pipeline_costs.catalog import NestedObject, NumericLeaf, RawCatalog, classify_value
from pipeline_costs.config import REGIONS, VM_IMAGE_PREFIX, ZONES

logger = structlog.get_logger(__name__)


def composite_key(region: str, zone: str, machine_type: str) -> str:
    return f"{region}-{zone}/{machine_type}"


@dataclass(frozen=True)
class PriceTable:
    """Read-only lookup from `region-zone/machine-type` to hourly USD price.

    `machine_types` maps every VM image seen in the catalog to the number of
    regions that contributed prices. A count of zero means the catalog entry
    matched no recognized region; such a machine type has no lookup prices.
    """

    prices: Mapping[str, float]
    machine_types: Mapping[str, int] = field(default_factory=dict)
    catalog_version: str = ""
    catalog_updated: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))
        object.__setattr__(self, "machine_types", MappingProxyType(dict(self.machine_types)))

    def lookup(self, key: str) -> float | None:
        return self.prices.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.prices

    def __len__(self) -> int:
        return len(self.prices)

    def sorted_items(self) -> list[tuple[str, float]]:
        return sorted(self.prices.items())


def machine_type_from_key(catalog_key: str) -> str | None:
    """Return the canonical machine type for a VM image key, else None."""
    if not catalog_key.startswith(VM_IMAGE_PREFIX):
        return None
    return catalog_key[len(VM_IMAGE_PREFIX):].lower()


def build_price_table(
    catalog: RawCatalog,
    regions: Iterable[str] = REGIONS,
    zones: Iterable[str] = ZONES,
) -> PriceTable:
    """Expand VM image entries into one price per region/zone/machine type.

    Region fields that are absent, non-numeric or negative are skipped for
    that region only. Prefixed entries that are not objects are skipped
    entirely. Neither aborts the build.
    """
    region_list = list(regions)
    zone_list = list(zones)
    prices: dict[str, float] = {}
    machine_types: dict[str, int] = {}

    for catalog_key, entry in catalog.entries.items():
        machine_type = machine_type_from_key(catalog_key)
        if machine_type is None:
            continue
        machine_types[machine_type] = 0

        if not isinstance(entry, NestedObject):
            logger.warning(
                "catalog_entry_not_object",
                catalog_key=catalog_key,
                shape=type(entry).__name__,
            )
            continue

        for region in region_list:
            if region not in entry.fields:
                continue
            value = classify_value(entry.fields[region])
            if not isinstance(value, NumericLeaf) or value.value < 0:
                logger.warning(
                    "catalog_region_price_not_numeric",
                    catalog_key=catalog_key,
                    region=region,
                    value=repr(entry.fields[region]),
                )
                continue
            for zone in zone_list:
                prices[composite_key(region, zone, machine_type)] = value.value
            machine_types[machine_type] += 1

    uncovered = sorted(name for name, count in machine_types.items() if count == 0)
    if uncovered:
        logger.warning("catalog_machine_types_without_regions", machine_types=uncovered)

    logger.info(
        "price_table_built",
        machine_types=len(machine_types),
        entries=len(prices),
        catalog_version=catalog.version,
    )
    return PriceTable(
        prices=prices,
        machine_types=machine_types,
        catalog_version=catalog.version,
        catalog_updated=catalog.updated,
    )
