"""HTTP client construction for outbound calls using httpx."""

from __future__ import annotations

import httpx


def create_async_client(timeout: float) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` with a bounded timeout on every phase."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"Accept": "application/json"},
    )
