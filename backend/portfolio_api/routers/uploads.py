"""Upload, rebuild, audit-log and clear routes."""

from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile

import portfolio_api.state as state
from portfolio_api.schemas import (
    FileUploadResult,
    RebuildResponse,
    UploadLogItem,
    UploadLogResponse,
    UploadResponse,
)
from portfolio_engine.detector import UNKNOWN_FILE, file_type_label
from portfolio_engine.pipeline import BatchResult, clear_all, rebuild_customers, upload_batch

router = APIRouter()


def _run_batch(files: list[tuple[str, str]], as_of: date | None) -> BatchResult:
    with state._ingest_lock:
        return upload_batch(state.get_store(), files, as_of=as_of)


@router.post("/api/uploads", response_model=UploadResponse)
async def upload_files(
    files: list[UploadFile] = File(...),
    as_of: date | None = None,
) -> UploadResponse:
    decoded: list[tuple[str, str]] = []
    for f in files:
        name = Path(f.filename or "upload.csv").name
        content = await f.read()
        decoded.append((name, content.decode("utf-8", errors="replace")))

    # Parsing and table writes happen in a worker thread so the event loop
    # stays free for status polling.
    batch = await asyncio.to_thread(_run_batch, decoded, as_of)

    if len(batch.files) == 1 and batch.files[0].file_type == UNKNOWN_FILE:
        raise HTTPException(status_code=400, detail=batch.files[0].error)

    return UploadResponse(
        files=[
            FileUploadResult(
                file_name=o.file_name,
                file_type=o.file_type,
                label=file_type_label(o.file_type) if o.file_type != UNKNOWN_FILE else None,
                status=o.status,
                record_count=o.record_count,
                error=o.error,
            )
            for o in batch.files
        ],
        customer_count=batch.customer_count,
    )


@router.post("/api/customers/rebuild", response_model=RebuildResponse)
def rebuild(as_of: date | None = None) -> RebuildResponse:
    with state._ingest_lock:
        n = rebuild_customers(state.get_store(), as_of=as_of)
    return RebuildResponse(customer_count=n)


@router.get("/api/uploads/log", response_model=UploadLogResponse)
def upload_log(limit: int = 20) -> UploadLogResponse:
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be >= 1")
    entries = sorted(state.get_store().get_logs(), key=lambda e: e.id or 0, reverse=True)
    return UploadLogResponse(entries=[UploadLogItem(**e.model_dump()) for e in entries[:limit]])


@router.delete("/api/data")
def delete_data() -> dict[str, str]:
    with state._ingest_lock:
        clear_all(state.get_store())
    return {"status": "ok"}
