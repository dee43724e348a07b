"""
Standalone entry point: ``python -m portfolio_api``.

During development ``uvicorn portfolio_api.main:app --reload`` is used
instead.  Here the port comes from ``PORTFOLIO_PORT`` or, when unset, from
the OS; ``PORT:{port}`` is printed (flushed) before uvicorn blocks so a
parent process can find the server.
"""

from __future__ import annotations

import logging
import os
import socket

from portfolio_api.main import app as _fastapi_app


def _find_free_port() -> int:
    """Bind to port 0, let the OS assign a free port, return it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("PORTFOLIO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORTFOLIO_PORT") or _find_free_port())
    print(f"PORT:{port}", flush=True)

    import uvicorn

    # Single worker: ingestion is serialized by an in-process lock.
    uvicorn.run(_fastapi_app, host="127.0.0.1", port=port, workers=1, access_log=False)


if __name__ == "__main__":
    main()
