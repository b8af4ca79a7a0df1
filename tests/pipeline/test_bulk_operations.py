import json

import httpx
import pytest

from conftest import feasibility_body, order_body, provider
from geotasker.core.errors import (
    ConfirmationRequiredError,
    ErrorCode,
    InvalidRequestError,
)
from geotasker.models.bulk import BatchProgress, BulkFeasibilityRequest, BulkOrderRequest
from geotasker.pipeline.bulk_operations import BulkOrchestrator
from geotasker.pipeline.feasibility_poller import FeasibilityPoller


def locations(count: int) -> list[dict]:
    return [
        {"id": f"loc-{i}", "name": f"Site {i}", "location": f"{-1.9 - i * 0.1},30.06"}
        for i in range(count)
    ]


def feasibility_request(count: int = 3, **overrides) -> BulkFeasibilityRequest:
    return BulkFeasibilityRequest.model_validate(
        {
            "locations": locations(count),
            "productType": "sar",
            "resolution": "HIGH",
            "startDate": "2026-10-19",
            "endDate": "2026-12-01",
            **overrides,
        }
    )


def order_request(count: int = 3, **overrides) -> BulkOrderRequest:
    return BulkOrderRequest.model_validate(
        {
            "locations": locations(count),
            "productType": "DAY",
            "resolution": "VERY_HIGH",
            "startDate": "2026-10-19",
            "endDate": "2026-12-01",
            "confirmationToken": "user-confirmed",
            **overrides,
        }
    )


@pytest.fixture()
def orchestrator(imagery_client, sleeps) -> BulkOrchestrator:
    return BulkOrchestrator(
        imagery_client,
        feasibility_poller=FeasibilityPoller(imagery_client, interval=3.0, sleep=sleeps),
        feasibility_delay=0.25,
        order_delay=0.5,
        sleep=sleeps,
    )


@pytest.mark.anyio
async def test_feasibility_results_follow_input_order(orchestrator, vendor, sleeps):
    vendor.add(
        "POST",
        "/feasibility",
        feasibility_body("f-0", score=0.95, providers=[provider(opportunities=2)]),
        feasibility_body("f-1", score=0.0, weather=0.1, providers=[provider(score=0.0)]),
        feasibility_body("f-2", score=0.85, providers=[provider(opportunities=1)]),
    )

    report = await orchestrator.run_feasibility(feasibility_request(3))

    assert [r.location_id for r in report.results] == ["loc-0", "loc-1", "loc-2"]
    assert [r.result.feasible for r in report.results] == [True, False, True]
    assert report.results[0].result.opportunity_count == 2
    assert report.progress.completed == 3
    assert report.progress.successful == 3
    # only between items, never after the last one
    assert sleeps.calls == [0.25, 0.25]


@pytest.mark.anyio
async def test_one_failure_does_not_abort_the_batch(orchestrator, vendor):
    vendor.add(
        "POST",
        "/feasibility",
        feasibility_body("f-0", score=0.9, providers=[provider()]),
        httpx.Response(401, json={"message": "bad key"}),
        feasibility_body("f-2", score=0.9, providers=[provider()]),
    )

    report = await orchestrator.run_feasibility(feasibility_request(3))

    assert [r.success for r in report.results] == [True, False, True]
    failed = report.results[1]
    assert failed.error.code == ErrorCode.AUTH_INVALID
    assert failed.error.message == "bad key"
    assert failed.result is None
    assert report.progress.successful == 2
    assert report.progress.failed == 1


@pytest.mark.anyio
async def test_invalid_location_is_a_per_item_failure(orchestrator, vendor):
    vendor.add("POST", "/feasibility", feasibility_body(score=0.9, providers=[provider()]))
    request = feasibility_request(2)
    bad = request.locations[0].model_copy(update={"location": "not a place"})
    request.locations[0] = bad

    report = await orchestrator.run_feasibility(request)

    assert not report.results[0].success
    assert report.results[0].error.code == ErrorCode.INVALID_REQUEST
    assert report.results[1].success
    assert vendor.calls("POST", "/feasibility") == 1


@pytest.mark.anyio
async def test_progress_snapshots_are_reported_before_and_after_each_item(
    orchestrator, vendor
):
    vendor.add("POST", "/feasibility", feasibility_body(score=0.9, providers=[provider()]))
    seen: list[BatchProgress] = []

    await orchestrator.run_feasibility(feasibility_request(2), on_progress=seen.append)

    assert [(p.completed, p.pending, p.current_location) for p in seen] == [
        (0, 2, "Site 0"),
        (1, 1, "Site 0"),
        (1, 1, "Site 1"),
        (2, 0, "Site 1"),
    ]
    for p in seen:
        assert p.completed + p.pending == p.total
        assert p.successful + p.failed == p.completed
    assert seen[-1].is_finished


@pytest.mark.anyio
async def test_too_many_locations_rejected_before_any_call(orchestrator, vendor):
    with pytest.raises(InvalidRequestError) as exc_info:
        await orchestrator.run_feasibility(feasibility_request(101))

    assert exc_info.value.message == "Too many locations: 101. Maximum is 100 per request."
    assert vendor.requests == []


@pytest.mark.anyio
async def test_empty_and_duplicate_locations_rejected(orchestrator, vendor):
    with pytest.raises(InvalidRequestError):
        await orchestrator.run_feasibility(feasibility_request(0))

    request = feasibility_request(2)
    request.locations[1] = request.locations[0]
    with pytest.raises(InvalidRequestError) as exc_info:
        await orchestrator.run_feasibility(request)

    assert "loc-0" in exc_info.value.message
    assert vendor.requests == []


@pytest.mark.anyio
@pytest.mark.parametrize("token", [None, "", "   "])
async def test_orders_require_confirmation_token(orchestrator, vendor, token):
    with pytest.raises(ConfirmationRequiredError) as exc_info:
        await orchestrator.place_orders(order_request(2, confirmationToken=token))

    assert exc_info.value.code == ErrorCode.CONFIRMATION_REQUIRED
    assert vendor.requests == []


@pytest.mark.anyio
async def test_orders_placed_with_default_delivery(orchestrator, vendor, sleeps):
    vendor.add(
        "POST",
        "/order-tasking",
        order_body("order-a"),
        order_body("order-b"),
        order_body("order-c"),
    )

    report = await orchestrator.place_orders(order_request(3))

    assert [r.result.id for r in report.results] == ["order-a", "order-b", "order-c"]
    body = json.loads(vendor.requests[0].read())
    assert body["deliveryDriver"] == "S3"
    assert body["deliveryParams"] == {"bucket": "s3://default-bucket"}
    assert body["productType"] == "DAY"
    assert body["resolution"] == "VERY HIGH"
    assert body["aoi"].startswith("POLYGON")
    assert sleeps.calls == [0.5, 0.5]
