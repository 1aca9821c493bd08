"""Operations Source collaborators.

A source lists raw operation records for a project. The HTTP source talks to
the Genomics v1 REST endpoint and expects a JSON object with an `operations`
list. Unlike catalog loading, any failure here aborts the current report.
"""

from __future__ import annotations

import json
import os
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

import structlog

from pipeline_costs.config import (
    DEFAULT_GENOMICS_API_URL,
    DEFAULT_SOURCE_TIMEOUT_SECONDS,
    GENOMICS_API_TOKEN_ENV,
    GENOMICS_API_URL_ENV,
)
from pipeline_costs.errors import OperationsSourceError

logger = structlog.get_logger(__name__)


class OperationsSource(Protocol):
    def list_operations(self, project_id: str) -> list[dict[str, Any]]:
        ...


def _extract_operations(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        raise OperationsSourceError("operations response must be a JSON object")
    operations = payload.get("operations", [])
    if not isinstance(operations, list):
        raise OperationsSourceError("operations response field 'operations' must be a list")
    return [op for op in operations if isinstance(op, dict)]


class GenomicsOperationsSource:
    """List operations via `GET {base_url}/v1/operations?filter=projectId = X`."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout_seconds: float = DEFAULT_SOURCE_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = (
            base_url or os.getenv(GENOMICS_API_URL_ENV, "").strip() or DEFAULT_GENOMICS_API_URL
        ).rstrip("/")
        self.token = token if token is not None else os.getenv(GENOMICS_API_TOKEN_ENV, "").strip()
        self.timeout_seconds = timeout_seconds

    def build_url(self, project_id: str) -> str:
        query = urlencode({"filter": f"projectId = {project_id}"})
        return f"{self.base_url}/v1/operations?{query}"

    def list_operations(self, project_id: str) -> list[dict[str, Any]]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        request = Request(self.build_url(project_id), headers=headers, method="GET")
        try:
            with urlopen(request, timeout=self.timeout_seconds) as resp:  # noqa: S310
                payload = json.loads(resp.read().decode("utf-8"))
        except HTTPError as exc:
            raise OperationsSourceError(f"operations list failed: HTTP {exc.code} {exc.reason}") from exc
        except (URLError, TimeoutError) as exc:
            raise OperationsSourceError(f"operations list failed: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise OperationsSourceError(f"operations list returned invalid JSON: {exc}") from exc

        operations = _extract_operations(payload)
        logger.info("operations_listed", project=project_id, count=len(operations))
        return operations


class StaticOperationsSource:
    """In-memory source keyed by project id."""

    def __init__(self, operations: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.operations = dict(operations or {})

    def list_operations(self, project_id: str) -> list[dict[str, Any]]:
        return list(self.operations.get(project_id, []))
