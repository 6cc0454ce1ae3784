import asyncio, json, logging, time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from bidboard.core import BatchResult, ListingDescriptor, PropertyRecord, calculate_total
from bidboard.fetchers.huutokaupat import read_listing
from bidboard.settings import MarkersCfg, Settings, load_settings

log = logging.getLogger("bidboard")

DEFAULT_DELAY = 0.5


def listing_url(base_url: str, listing: ListingDescriptor) -> str:
    return f"{base_url.rstrip('/')}/{listing.id}"


def make_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=settings.source.timeout_seconds,
        headers=settings.request_headers(),
    )


async def run_batch(
    catalog: Sequence[ListingDescriptor],
    client: httpx.AsyncClient,
    *,
    base_url: str,
    delay: float = DEFAULT_DELAY,
    markers: Optional[MarkersCfg] = None,
    now: Optional[datetime] = None,
) -> BatchResult:
    """One polite pass over ``catalog``: fetch, parse, sleep, repeat.

    Items are handled strictly one after another with ``delay`` seconds of
    sleep after each (the last included). A failed item yields an Error
    record and the pass carries on.
    """
    log.info("Starting to scrape %d properties...", len(catalog))
    records: list[PropertyRecord] = []

    for idx, listing in enumerate(catalog, start=1):
        url = listing_url(base_url, listing)
        log.info(
            "Fetching %d/%d: %s (ID: %s)",
            idx,
            len(catalog),
            listing.property_number,
            listing.id,
        )
        started = time.monotonic()
        result = await read_listing(client, url, markers=markers, now=now)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        log.info(
            "  %s: %s€, %s (%dms)",
            listing.property_number,
            result.current_price,
            result.status.value,
            elapsed_ms,
        )
        records.append(PropertyRecord.build(listing, url, result))

        await asyncio.sleep(delay)

    total = calculate_total(records)
    log.info("Complete! Total: %s€", total)
    captured = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return BatchResult(
        properties=records,
        total=total,
        timestamp=captured.replace("+00:00", "Z"),
    )


async def scrape(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> BatchResult:
    """Run one batch over the configured catalog."""
    settings = settings or load_settings()
    kwargs = dict(
        base_url=settings.source.base_url,
        delay=settings.source.delay_seconds,
        markers=settings.markers,
    )
    if client is not None:
        return await run_batch(settings.catalog(), client, **kwargs)
    async with make_client(settings) as own:
        return await run_batch(settings.catalog(), own, **kwargs)


# --------------------------------------------------------------------------- #
#  Snapshot file
# --------------------------------------------------------------------------- #


def finnish_timestamp(dt: datetime) -> str:
    """``19.10.2026 klo 14.05.09`` (fi-FI ``toLocaleString`` shape)."""
    return f"{dt.day}.{dt.month}.{dt.year} klo {dt:%H.%M.%S}"


def write_snapshot(result: BatchResult, path: Path | str) -> Path:
    data = result.to_json_dict()
    data["lastUpdated"] = finnish_timestamp(datetime.now().astimezone())
    out = Path(path)
    out.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info("Data saved to %s", out)
    return out


# --------------------------------------------------------------------------- #
#  Scheduled polling
# --------------------------------------------------------------------------- #


async def _poll_once(settings: Settings, output: Path) -> None:
    try:
        result = await scrape(settings)
    except Exception:
        log.exception("Scheduled scrape failed")
        return
    write_snapshot(result, output)
    log.info(
        "Total: %s€ | Properties: %d", result.total, len(result.properties)
    )


async def _schedule(settings: Settings, output: Path):
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        _poll_once,
        "interval",
        args=(settings, output),
        minutes=settings.polling.interval_minutes,
        next_run_time=datetime.now(timezone.utc),
        id="scrape",
        coalesce=True,
        max_instances=1,
        misfire_grace_time=30,
    )
    scheduler.start()
    print("bidboard watching – Ctrl+C to quit")
    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        scheduler.shutdown(wait=False)


def watch(output: Optional[str] = None):
    settings = load_settings()
    asyncio.run(_schedule(settings, Path(output or settings.snapshot_path)))
