"""FastAPI server for the pipelines cost dashboard."""

from __future__ import annotations

import os

from pipeline_costs.api_models import CostReportResponse, PriceTableResponse
from pipeline_costs.api_service import (
    render_report_html,
    resolve_project,
    run_cost_report,
    run_price_table,
)
from pipeline_costs.catalog import load_raw_catalog
from pipeline_costs.config import CORS_ORIGINS_ENV
from pipeline_costs.cost_calculator import Clock, utc_now
from pipeline_costs.errors import (
    CostDashboardError,
    OperationDecodeError,
    OperationsSourceError,
    ProjectNotConfiguredError,
)
from pipeline_costs.operations_source import GenomicsOperationsSource, OperationsSource
from pipeline_costs.price_table import PriceTable, build_price_table


def create_app(
    price_table: PriceTable | None = None,
    operations_source: OperationsSource | None = None,
    now: Clock = utc_now,
):
    """Create the FastAPI app.

    The price table is built here once when not supplied; a catalog that fails
    to decode raises CatalogError and the app is not created.
    """
    try:
        from fastapi import FastAPI, HTTPException
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import HTMLResponse, PlainTextResponse
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError(
            "FastAPI is not installed. Install with: "
            "pip install 'fastapi>=0.110,<1.0' 'uvicorn>=0.30,<1.0'"
        ) from exc

    table = price_table if price_table is not None else build_price_table(load_raw_catalog())
    source = operations_source if operations_source is not None else GenomicsOperationsSource()

    app = FastAPI(title="Pipelines Cost Dashboard", version="0.1.0")
    app.state.price_table = table

    origins_raw = os.getenv(CORS_ORIGINS_ENV, "*")
    allow_origins = [origin.strip() for origin in origins_raw.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def dashboard(project: str | None = None):
        # Fatal per-request errors replace the page with the raw message.
        try:
            report = run_cost_report(resolve_project(project), source, table, now=now)
        except CostDashboardError as exc:
            return PlainTextResponse(str(exc))
        return HTMLResponse(render_report_html(report))

    @app.get("/api/v1/report", response_model=CostReportResponse)
    def cost_report(project: str | None = None) -> CostReportResponse:
        try:
            return run_cost_report(resolve_project(project), source, table, now=now)
        except ProjectNotConfiguredError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except OperationsSourceError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except OperationDecodeError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.get("/api/v1/prices", response_model=PriceTableResponse)
    def prices() -> PriceTableResponse:
        return run_price_table(table)

    return app
