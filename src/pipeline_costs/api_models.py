"""Pydantic API contracts for the cost dashboard endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportRowModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    machine_type: str
    duration_seconds: Optional[float] = Field(default=None, ge=0)
    duration_display: str
    hourly_price_usd: Optional[float] = Field(default=None, ge=0)
    billed_hours: Optional[float] = Field(default=None, ge=0)
    cost: str
    running: bool


class PriceEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    hourly_price_usd: float = Field(ge=0)


class PriceTableResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prices: list[PriceEntry]
    total: int
    catalog_version: str
    catalog_updated: str


class CostReportResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project: str
    rows: list[ReportRowModel]
    prices: list[PriceEntry]
    total_known_cost_usd: float = Field(ge=0)
    unknown_cost_count: int = Field(ge=0)
    generated_at_utc: str
    catalog_version: str
