import json

import httpx
import pytest

from geotasker.core.errors import ErrorCode

ARCHIVE = {
    "archiveId": "arch-1",
    "provider": "PLANET",
    "productType": "DAY",
    "resolution": "HIGH",
    "captureTimestamp": "2026-09-01T10:00:00Z",
    "cloudCoveragePercent": 3.0,
}


@pytest.mark.anyio
async def test_search_archive_normalizes_location(registry, vendor):
    vendor.add("POST", "/archives", {"archives": [ARCHIVE], "nextPage": "page-2"})

    result = await registry.call(
        "search_archive",
        {
            "location": "-1.95,30.06",
            "fromDate": "2026-08-01",
            "maxCloudCoveragePercent": 10,
            "productTypes": ["day"],
        },
    )

    assert result["success"] is True
    assert result["count"] == 1
    assert result["hasMore"] is True
    assert result["nextPage"] == "page-2"
    assert result["archives"][0]["archiveId"] == "arch-1"
    body = json.loads(vendor.requests[0].read())
    assert body["aoi"].startswith("POLYGON ((")
    assert body["fromDate"] == "2026-08-01T00:00:00+00:00"
    assert body["productTypes"] == ["DAY"]


@pytest.mark.anyio
async def test_search_archive_rejects_bad_location(registry, vendor):
    result = await registry.call("search_archive", {"location": "somewhere nice"})

    assert result["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert result["error"]["details"]["errors"][0]["field"] == "location"
    assert vendor.requests == []


@pytest.mark.anyio
async def test_get_archives_page(registry, vendor):
    vendor.add("GET", "/archives", {"archives": [ARCHIVE, ARCHIVE], "total": 2})

    result = await registry.call("get_archives_page", {"pageHash": "page-2"})

    assert result["count"] == 2
    assert result["hasMore"] is False
    assert vendor.requests[0].url.params["page"] == "page-2"


@pytest.mark.anyio
async def test_get_archive_not_found(registry, vendor):
    vendor.add("GET", "/archives/arch-x", httpx.Response(404))

    result = await registry.call("get_archive", {"archiveId": "arch-x"})

    assert result["error"]["code"] == ErrorCode.NOT_FOUND
    assert result["troubleshooting"]["possibleCauses"] == ["Resource not found"]


@pytest.mark.anyio
async def test_monitor_lifecycle(registry, vendor):
    monitor = {"id": "mon-1", "status": "ACTIVE", "webhookUrl": "https://hooks.test/new"}
    vendor.add("POST", "/notifications", monitor)
    vendor.add("GET", "/notifications", {"notifications": [monitor]})
    vendor.add("GET", "/notifications/mon-1", monitor)
    vendor.add("DELETE", "/notifications/mon-1", httpx.Response(204))

    created = await registry.call(
        "create_monitor",
        {"location": "-1.95,30.06", "webhookUrl": "https://hooks.test/new", "gsdMax": 1.5},
    )
    listed = await registry.call("list_monitors", {})
    fetched = await registry.call("get_monitor", {"monitorId": "mon-1"})
    deleted = await registry.call("delete_monitor", {"monitorId": "mon-1"})

    assert created["monitor"]["id"] == "mon-1"
    assert listed["total"] == 1
    assert fetched["monitor"]["webhookUrl"] == "https://hooks.test/new"
    assert deleted == {"success": True, "message": "Monitor mon-1 deleted"}
    body = json.loads(vendor.requests[0].read())
    assert body["webhookUrl"] == "https://hooks.test/new"
    assert body["gsdMax"] == 1.5


@pytest.mark.anyio
async def test_create_monitor_rejects_bad_webhook(registry, vendor):
    result = await registry.call(
        "create_monitor", {"location": "-1.95,30.06", "webhookUrl": "not-a-url"}
    )

    assert result["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert vendor.requests == []
