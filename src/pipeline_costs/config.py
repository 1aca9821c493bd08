"""Configuration constants for the pipelines cost dashboard.

This module centralizes the fixed region and zone lists used to expand the
price catalog, the billing constants, and the names of the environment
variables read during application setup.
"""

from __future__ import annotations

# Catalog key prefix for per-machine-type VM image prices.
VM_IMAGE_PREFIX = "CP-COMPUTEENGINE-VMIMAGE-"

# Region fields expanded from each VM image entry. Pseudo-regions ("us",
# "europe", ...) are listed alongside fully-qualified regions. This list is
# not checked against what the catalog actually contains.
REGIONS = (
    "us",
    "us-central1",
    "us-east1",
    "us-east4",
    "us-west1",
    "europe",
    "europe-west1",
    "europe-west2",
    "europe-west3",
    "asia",
    "asia-east",
    "asia-northeast",
    "asia-southeast",
    "australia",
    "australia-northeast",
    "australia-southeast",
)

# Every region is assumed to have all six zones; all share the region price.
ZONES = ("a", "b", "c", "d", "e", "f")

# Time constants
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3_600

# Compute Engine bills a minimum of one minute per VM.
MIN_BILLED_SECONDS = SECONDS_PER_MINUTE

UNKNOWN_COST = "unknown"
OPERATION_NAME_PREFIX = "operations/"
OPERATION_NAME_LENGTH = 10

# Environment variables
PROJECT_ENV = "PROJECT"
PROJECT_FALLBACK_ENV = "GOOGLE_CLOUD_PROJECT"
GENOMICS_API_URL_ENV = "GENOMICS_API_URL"
GENOMICS_API_TOKEN_ENV = "GENOMICS_API_TOKEN"
CORS_ORIGINS_ENV = "PIPELINES_COST_CORS_ORIGINS"
DEBUG_ENV = "PIPELINES_COST_DEBUG"
CATALOG_PATH_ENV = "PIPELINES_COST_CATALOG_PATH"

DEFAULT_GENOMICS_API_URL = "https://genomics.googleapis.com"
DEFAULT_SOURCE_TIMEOUT_SECONDS = 15.0
