"""Runtime entrypoint served by uvicorn."""

from __future__ import annotations

from registry_api.main import create_app

app = create_app()
