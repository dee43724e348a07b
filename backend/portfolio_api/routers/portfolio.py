"""Read-side routes: status, Customer 360 and paginated table browsing."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

import portfolio_api.state as state
from portfolio_api.schemas import Customer360Response, StatusResponse, TablePageResponse
from portfolio_engine.io._utils import normalize_identifier
from portfolio_engine.pipeline import customer_360, data_status, last_processed
from portfolio_engine.store import DATA_TABLES

router = APIRouter()

_MAX_PAGE_SIZE = 1000


@router.get("/api/status", response_model=StatusResponse)
def status() -> StatusResponse:
    store = state.get_store()
    counts = data_status(store)
    has_data = bool(counts.pop("has_data"))
    return StatusResponse(counts=counts, has_data=has_data, last_processed=last_processed(store))


@router.get("/api/customers/{cif}", response_model=Customer360Response)
def get_customer(cif: str) -> Customer360Response:
    view = customer_360(state.get_store(), normalize_identifier(cif))
    if view is None:
        raise HTTPException(status_code=404, detail=f"Customer '{cif}' not found")
    return Customer360Response(**view)


@router.get("/api/tables/{table}", response_model=TablePageResponse)
def get_table(table: str, page: int = 1, page_size: int = 100) -> TablePageResponse:
    if table not in DATA_TABLES:
        raise HTTPException(status_code=404, detail=f"Unknown table '{table}'")
    if page < 1 or not 1 <= page_size <= _MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"page must be >= 1 and page_size between 1 and {_MAX_PAGE_SIZE}",
        )

    records = state.get_store().get_all(table)
    start = (page - 1) * page_size
    return TablePageResponse(
        table=table,
        page=page,
        page_size=page_size,
        total=len(records),
        records=records[start:start + page_size],
    )
