from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from fasthtml.common import to_xml

import bidboard.web.api as web_api
from bidboard.core import BatchResult, PropertyRecord, Status
from bidboard.settings import ListingCfg, Settings, SourceCfg
from bidboard.web.ui import format_price, properties_table


PAGES = {
    "5811936": r'highestBid\":15000 auctionEnd\":\"2099-11-23T14:05:19+02:00\"',
    "5811954": r"<p>Ei tarjouksia</p>",
}


def _handler(request: httpx.Request) -> httpx.Response:
    listing_id = request.url.path.rsplit("/", 1)[-1]
    if listing_id not in PAGES:
        raise httpx.ConnectTimeout("timed out", request=request)
    return httpx.Response(200, text=PAGES[listing_id])


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    settings = Settings(
        source=SourceCfg(delay_seconds=0),
        listing=[
            ListingCfg(id="5811936", property_number="444-519-3-28"),
            ListingCfg(id="5811954", property_number="444-519-2-104"),
            ListingCfg(id="9999999", property_number="444-519-9-99"),
        ],
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(_handler))
    monkeypatch.setattr(web_api, "load_settings", lambda: settings)
    monkeypatch.setattr(web_api, "get_client", lambda: client)
    return TestClient(web_api.api)


def test_properties_endpoint(api_client: TestClient) -> None:
    resp = api_client.get("/properties")
    assert resp.status_code == 200
    data = resp.json()

    assert set(data) == {"properties", "total", "timestamp"}
    assert [p["id"] for p in data["properties"]] == ["5811936", "5811954", "9999999"]
    assert data["total"] == 15000

    first, second, third = data["properties"]
    assert first["url"] == "https://huutokaupat.com/kohde/5811936"
    assert first["currentPrice"] == 15000
    assert first["status"] == "Active"
    assert first["minutesLeft"] > 0
    assert second["hasBids"] is False
    assert "auctionEnd" not in second
    assert third["status"] == "Error"
    assert third["currentPrice"] == 0


def test_format_price() -> None:
    assert format_price(0) == "0"
    assert format_price(15000) == "15\u00a0000"
    assert format_price(1234567) == "1\u00a0234\u00a0567"


def test_properties_table_renders_live_time_left() -> None:
    now = datetime(2025, 11, 23, 12, 0, tzinfo=timezone.utc)
    result = BatchResult(
        properties=[
            PropertyRecord(
                id="1",
                property_number="444-519-3-28",
                url="https://huutokaupat.com/kohde/1",
                current_price=15000,
                has_bids=True,
                status=Status.ACTIVE,
                auction_end=(now + timedelta(minutes=61)).isoformat(),
                minutes_left=999,
            ),
            PropertyRecord(
                id="2",
                property_number="444-519-2-104",
                url="https://huutokaupat.com/kohde/2",
                current_price=0,
                has_bids=False,
                status=Status.ENDED,
            ),
        ],
        total=15000,
        timestamp="2025-11-23T12:00:00Z",
    )
    html = to_xml(properties_table(result, now))

    assert "1h 1m" in html
    assert "Expired" in html
    assert "No bids (0 €)" in html
    assert "#1" in html
    assert "View Auction" in html
    assert "2025-11-23T12:00:00Z" in html


def test_composed_app_serves_api_under_prefix(api_client: TestClient) -> None:
    from bidboard.web.app import app

    resp = TestClient(app).get("/api/properties")
    assert resp.status_code == 200
    assert resp.json()["total"] == 15000
