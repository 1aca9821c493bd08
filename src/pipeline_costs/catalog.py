"""Loading and shape classification for the raw GCP price catalog.

The catalog is the JSON document behind the GCP pricing calculator. Its
`gcp_price_list` object mixes many record shapes (numeric leaves, nested
region maps, SSD slot lists, tier tables), so every value is classified into
a tagged variant before the price table builder reads it.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Union

from pipeline_costs.config import CATALOG_PATH_ENV
from pipeline_costs.errors import CatalogError

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable


# Shipped as package data (see pyproject.toml).
_DATA_DIR = files("pipeline_costs") / "data"
CATALOG_FILE = _DATA_DIR / "gcp_price_list.json"
CATALOG_SCHEMA_FILE = _DATA_DIR / "gcp_price_list.schema.json"


@dataclass(frozen=True)
class NumericLeaf:
    value: float


@dataclass(frozen=True)
class TextLeaf:
    value: str


@dataclass(frozen=True)
class NestedObject:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class ListValue:
    items: tuple[Any, ...]


@dataclass(frozen=True)
class OtherValue:
    """Booleans, nulls and anything else JSON decoding can produce."""

    raw: Any


CatalogValue = Union[NumericLeaf, TextLeaf, NestedObject, ListValue, OtherValue]


def classify_value(value: Any) -> CatalogValue:
    """Tag a decoded JSON value by shape. Booleans are never numeric."""
    if isinstance(value, bool):
        return OtherValue(value)
    if isinstance(value, (int, float)):
        return NumericLeaf(float(value))
    if isinstance(value, str):
        return TextLeaf(value)
    if isinstance(value, dict):
        return NestedObject(value)
    if isinstance(value, list):
        return ListValue(tuple(value))
    return OtherValue(value)


@dataclass(frozen=True)
class RawCatalog:
    """Decoded catalog document with classified price list entries."""

    version: str
    updated: str
    entries: Mapping[str, CatalogValue]


def _validate_schema(document: dict[str, Any], schema_path: Traversable) -> None:
    try:
        from jsonschema import Draft202012Validator
    except ImportError as exc:
        raise RuntimeError(
            "The 'jsonschema' package is required for catalog validation. "
            "Install it with: pip install jsonschema"
        ) from exc

    if not schema_path.is_file():
        raise CatalogError(f"Catalog schema not found: {schema_path}")
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON in {schema_path}: {exc}") from exc

    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(document), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        location = ".".join(str(token) for token in first.path) or "<root>"
        raise CatalogError(f"Catalog failed schema validation at {location}: {first.message}")


def parse_raw_catalog(text: str, schema_path: Traversable | None = None) -> RawCatalog:
    """Decode catalog JSON text into a RawCatalog.

    Raises CatalogError if the text is not valid JSON or does not have the
    expected top-level structure. There is no partial success at this level.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid catalog JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise CatalogError("Catalog JSON root must be an object")

    _validate_schema(document, schema_path or CATALOG_SCHEMA_FILE)

    price_list = document["gcp_price_list"]
    return RawCatalog(
        version=str(document.get("version") or ""),
        updated=str(document.get("updated") or ""),
        entries={key: classify_value(value) for key, value in price_list.items()},
    )


def load_raw_catalog(path: Traversable | None = None) -> RawCatalog:
    """Read and decode the catalog file (env override, then bundled data)."""
    if path is None:
        override = os.getenv(CATALOG_PATH_ENV, "").strip()
        path = Path(override) if override else CATALOG_FILE
    if not path.is_file():
        raise CatalogError(f"Price catalog not found: {path}")
    return parse_raw_catalog(path.read_text(encoding="utf-8"))
