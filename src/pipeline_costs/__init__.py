"""Pipelines Cost Dashboard: estimated VM cost of Genomics pipeline operations.

Builds a flat hourly price table from the GCP pricing-calculator catalog and
prices each operation by its billed duration and machine type.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Public API exports
from pipeline_costs.catalog import RawCatalog, classify_value, load_raw_catalog, parse_raw_catalog
from pipeline_costs.cost_calculator import (
    ReportRow,
    billed_hours,
    calculate_row,
    calculate_rows,
    clamp_billed_duration,
    format_cost,
    format_duration,
)
from pipeline_costs.errors import (
    CatalogError,
    CostDashboardError,
    OperationDecodeError,
    OperationsSourceError,
    ProjectNotConfiguredError,
)
from pipeline_costs.operations import OperationRecord, decode_operation
from pipeline_costs.operations_source import (
    GenomicsOperationsSource,
    OperationsSource,
    StaticOperationsSource,
)
from pipeline_costs.price_table import PriceTable, build_price_table

__all__ = [
    # Version
    "__version__",
    # Catalog and price table
    "RawCatalog",
    "classify_value",
    "load_raw_catalog",
    "parse_raw_catalog",
    "PriceTable",
    "build_price_table",
    # Operations
    "OperationRecord",
    "decode_operation",
    "OperationsSource",
    "GenomicsOperationsSource",
    "StaticOperationsSource",
    # Cost calculation
    "ReportRow",
    "billed_hours",
    "calculate_row",
    "calculate_rows",
    "clamp_billed_duration",
    "format_cost",
    "format_duration",
    # Errors
    "CostDashboardError",
    "CatalogError",
    "OperationDecodeError",
    "OperationsSourceError",
    "ProjectNotConfiguredError",
]
