"""
Portfolio backend: FastAPI app for branch extract ingestion and Customer 360.

Uploaded extracts are detected, transformed and committed to the Parquet
store under ``PORTFOLIO_DATA_DIR`` by ``portfolio_engine.pipeline``; this
module only wires routers, CORS and the health check.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_api.routers import portfolio, uploads

_log = logging.getLogger(__name__)

app = FastAPI(title="Branch Portfolio")

# ---------------------------------------------------------------------------
# CORS (dev-only): allow local frontend origins on common Vite/React ports,
# plus anything listed in PORTFOLIO_CORS_ORIGINS (comma-separated).
# ---------------------------------------------------------------------------
_DEV_ORIGINS = [
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_extra_origins = [
    o.strip() for o in os.environ.get("PORTFOLIO_CORS_ORIGINS", "").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_DEV_ORIGINS + _extra_origins,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(uploads.router)
app.include_router(portfolio.router)

if _extra_origins:
    _log.info("Extra CORS origins: %s", ", ".join(_extra_origins))
