"""
Global mutable state shared across the application.

Routers access these via ``import portfolio_api.state as state`` and then
``state.get_store()`` / ``state._ingest_lock`` so that tests rebinding the
store after changing ``PORTFOLIO_DATA_DIR`` see the new one everywhere.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from portfolio_engine.store import ParquetStore

# Disk paths
BASE_DIR = Path(__file__).resolve().parent.parent  # /backend/

# Uploads, rebuilds and clears run one at a time; reads never take the lock.
_ingest_lock = threading.Lock()

_store: ParquetStore | None = None


def data_dir() -> Path:
    """``PORTFOLIO_DATA_DIR`` when set, else the repo-local backend/data/portfolio/."""
    override = os.environ.get("PORTFOLIO_DATA_DIR")
    return Path(override) if override else BASE_DIR / "data" / "portfolio"


def get_store() -> ParquetStore:
    global _store
    if _store is None:
        _store = ParquetStore(data_dir())
    return _store


def reset_store() -> None:
    """Drop the cached store so the next ``get_store()`` re-reads ``PORTFOLIO_DATA_DIR``."""
    global _store
    _store = None
