"""
HTTP helpers.

Route collections and graph files are often published as static JSON (e.g. on a
project site) instead of living next to the code. `get_json` is the single place
that fetches them; it raises on non-2xx so the loader decides how to fail.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "flightplanner/0.1.0"


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """Fetch `url` (following redirects) and decode its JSON body.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the body is not valid JSON.
    """
    started = time.perf_counter()
    with httpx.Client(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})},
    ) as client:
        resp = client.get(url, params=params)
        resp.raise_for_status()
        try:
            payload = resp.json()
        except ValueError as e:
            raise ValueError(f"{url} did not return JSON (content-type {resp.headers.get('content-type')!r})") from e

    logger.info(
        "Fetched %s (%d bytes, %.0f ms)",
        resp.url,
        len(resp.content),
        (time.perf_counter() - started) * 1000,
    )
    return payload
