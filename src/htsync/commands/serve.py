"""Run the webhook API."""

from __future__ import annotations

from typing import Optional

import typer


def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default from HTSYNC_API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default from HTSYNC_API_PORT)"),
) -> None:
    """Start the webhook server."""
    from htsync_api.main import run

    run(host=host, port=port)
