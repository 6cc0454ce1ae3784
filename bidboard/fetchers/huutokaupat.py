"""
Huutokaupat.com listing reader.

The detail page is server-rendered and carries its state as a JSON blob
inside a JS string literal, so every quote in it arrives as ``\\"``.
We anchor on two field labels inside that blob:

  • highestBid   (whole euros, e.g. ``highestBid\\":15000``)
  • auctionEnd   (ISO-8601, optionally tagged ``$D``)

and on three Finnish phrases in the rendered text for the status badge.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Optional

import httpx

from bidboard.core import ExtractionResult, FetchError, Status
from bidboard.settings import MarkersCfg
from bidboard.timeleft import minutes_remaining

log = logging.getLogger("bidboard.fetch")

# --------------------------------------------------------------------------- #
#  Regex anchors
# --------------------------------------------------------------------------- #

_HIGHEST_BID_RE = re.compile(r'highestBid\\":(?P<bid>\d+)')
_AUCTION_END_RE = re.compile(
    r'auctionEnd\\":\\"(?:\$D)?'
    r'(?P<end>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[^"\\]*)\\'
)


# --------------------------------------------------------------------------- #
#  HTTP
# --------------------------------------------------------------------------- #


async def fetch_page(client: httpx.AsyncClient, url: str) -> str:
    """GET ``url`` once and return the body, whatever the status code."""
    try:
        r = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(f"{url}: {exc}") from exc
    if r.status_code >= 400:
        log.debug("%s answered %s, parsing body anyway", url, r.status_code)
    return r.text


# --------------------------------------------------------------------------- #
#  Parse
# --------------------------------------------------------------------------- #


def extract_fields(html: str) -> tuple[int, Optional[str]]:
    """Return ``(current_price, auction_end)``; misses give ``(0, None)``."""
    price = 0
    m = _HIGHEST_BID_RE.search(html)
    if m:
        try:
            price = int(m.group("bid"), 10)
        except ValueError:
            # digit run past the int conversion limit
            log.warning("Unreadable highestBid (%d digits)", len(m.group("bid")))

    m = _AUCTION_END_RE.search(html)
    auction_end = m.group("end") if m else None
    return price, auction_end


def classify(
    html: str,
    price: int,
    minutes_left: Optional[int],
    markers: Optional[MarkersCfg] = None,
) -> tuple[Status, bool]:
    markers = markers or MarkersCfg()

    # A zero price only counts as "no bids" when the page says so.
    has_bids = price > 0 or markers.no_bids not in html

    status = Status.ACTIVE
    if markers.ended in html:
        status = Status.ENDED
    if markers.verifying in html:
        status = Status.ENDED_VERIFYING

    # the clock beats the page text
    if minutes_left is not None and minutes_left < 0:
        status = Status.ENDED

    return status, has_bids


def parse_listing(
    html: str,
    *,
    markers: Optional[MarkersCfg] = None,
    now: Optional[datetime] = None,
) -> ExtractionResult:
    price, auction_end = extract_fields(html)
    minutes_left = minutes_remaining(auction_end, now) if auction_end else None
    status, has_bids = classify(html, price, minutes_left, markers)
    return ExtractionResult(
        current_price=price,
        has_bids=has_bids,
        status=status,
        auction_end=auction_end,
        minutes_left=minutes_left,
    )


def error_result() -> ExtractionResult:
    return ExtractionResult(current_price=0, has_bids=False, status=Status.ERROR)


async def read_listing(
    client: httpx.AsyncClient,
    url: str,
    *,
    markers: Optional[MarkersCfg] = None,
    now: Optional[datetime] = None,
) -> ExtractionResult:
    """Fetch + parse one listing; any failure becomes an Error result."""
    try:
        html = await fetch_page(client, url)
    except FetchError as exc:
        log.warning("Error fetching %s: %s", url, exc)
        return error_result()
    try:
        return parse_listing(html, markers=markers, now=now)
    except Exception:
        log.exception("Error parsing %s", url)
        return error_result()
