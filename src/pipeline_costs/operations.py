"""Typed decoding of raw Genomics operation records."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

import structlog

from pipeline_costs.errors import OperationDecodeError

logger = structlog.get_logger(__name__)

# Fractional seconds are normalized to the six digits datetime accepts;
# Genomics timestamps carry nanoseconds.
_FRACTION_RE = re.compile(r"\.(\d+)")


class FieldState(str, Enum):
    """Decode outcome for an optional operation field."""

    PRESENT = "present"
    ABSENT = "absent"
    INVALID = "invalid"


@dataclass(frozen=True)
class TimestampField:
    state: FieldState
    value: Optional[datetime] = None
    raw: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return self.state is FieldState.PRESENT


@dataclass(frozen=True)
class MachineTypeField:
    state: FieldState
    value: str = ""

    @property
    def is_present(self) -> bool:
        return self.state is FieldState.PRESENT


@dataclass(frozen=True)
class OperationRecord:
    """One operation as read from the Operations Source."""

    name: str
    start_time: TimestampField
    end_time: TimestampField
    machine_type: MachineTypeField


def parse_rfc3339(raw: str) -> datetime:
    """Parse an RFC3339 timestamp; a UTC offset (or `Z`) is required."""
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw.strip())
    text = text.replace("Z", "+00:00").replace("z", "+00:00")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {raw!r}")
    return parsed


def decode_timestamp(raw: Any, field_name: str, operation: str) -> TimestampField:
    if raw is None or raw == "":
        return TimestampField(FieldState.ABSENT)
    if not isinstance(raw, str):
        raise OperationDecodeError(
            f"{operation}: metadata field '{field_name}' must be a string, got {type(raw).__name__}"
        )
    try:
        return TimestampField(FieldState.PRESENT, value=parse_rfc3339(raw), raw=raw)
    except ValueError:
        logger.warning("operation_timestamp_invalid", operation=operation, field=field_name, raw=raw)
        return TimestampField(FieldState.INVALID, raw=raw)


def _maybe_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def decode_machine_type(runtime_metadata: Any, operation: str) -> MachineTypeField:
    """Read `computeEngine.machineType` from best-effort runtime metadata."""
    if runtime_metadata is None or runtime_metadata == "":
        return MachineTypeField(FieldState.ABSENT)
    try:
        runtime = _maybe_json(runtime_metadata)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("operation_runtime_metadata_invalid", operation=operation)
        return MachineTypeField(FieldState.INVALID)
    if not isinstance(runtime, dict):
        logger.warning("operation_runtime_metadata_invalid", operation=operation)
        return MachineTypeField(FieldState.INVALID)

    compute_engine = runtime.get("computeEngine")
    if compute_engine is None:
        return MachineTypeField(FieldState.ABSENT)
    if not isinstance(compute_engine, dict):
        logger.warning("operation_runtime_metadata_invalid", operation=operation)
        return MachineTypeField(FieldState.INVALID)

    machine_type = compute_engine.get("machineType")
    if machine_type is None or machine_type == "":
        return MachineTypeField(FieldState.ABSENT)
    if not isinstance(machine_type, str):
        logger.warning("operation_runtime_metadata_invalid", operation=operation)
        return MachineTypeField(FieldState.INVALID)
    return MachineTypeField(FieldState.PRESENT, value=machine_type)


def decode_operation(raw: Mapping[str, Any]) -> OperationRecord:
    """Decode one raw operation.

    The primary metadata blob must decode to an object; otherwise
    OperationDecodeError is raised and the whole report is aborted. Timestamps
    and runtime metadata degrade to ABSENT/INVALID field states instead.
    """
    name = str(raw.get("name") or "")
    try:
        metadata = _maybe_json(raw.get("metadata"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise OperationDecodeError(f"{name}: invalid operation metadata: {exc}") from exc
    if not isinstance(metadata, dict):
        raise OperationDecodeError(f"{name}: operation metadata must be an object")

    return OperationRecord(
        name=name,
        start_time=decode_timestamp(metadata.get("startTime"), "startTime", name),
        end_time=decode_timestamp(metadata.get("endTime"), "endTime", name),
        machine_type=decode_machine_type(metadata.get("runtimeMetadata"), name),
    )
