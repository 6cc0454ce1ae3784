# bidboard/web/api.py
from __future__ import annotations
import logging
from typing import Optional

import httpx
from fastapi import FastAPI

from bidboard.core import BatchResult
from bidboard.scheduler import make_client, scrape
from bidboard.settings import load_settings

log = logging.getLogger("bidboard_web.api")

api = FastAPI(
    title="bidboard API", version="1.0.0", docs_url="/docs", openapi_url="/openapi.json"
)

# One shared client per process, built on first use.
_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = make_client(load_settings())
    return _client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def run_live_batch() -> BatchResult:
    """Fresh batch for every caller; nothing is cached between requests."""
    return await scrape(load_settings(), client=get_client())


@api.get(
    "/properties",
    response_model=BatchResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def properties():
    log.info("Fetching auction data...")
    return await run_live_batch()
