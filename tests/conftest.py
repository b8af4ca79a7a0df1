import os
from collections import defaultdict
from typing import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

os.environ["ENV_STATE"] = "test"
from geotasker.api.deps import get_registry
from geotasker.clients.imagery_api import ImageryApiClient
from geotasker.main import app
from geotasker.tools import ToolContext, build_registry

VENDOR_BASE_URL = "https://vendor.test/platform-api"
VENDOR_PATH_PREFIX = "/platform-api"

SQUARE_WKT = "POLYGON ((30 -2, 30.01 -2, 30.01 -1.99, 30 -1.99, 30 -2))"


class FakeVendor:
    """
    Stands in for the imagery vendor behind an httpx.MockTransport.

    Responses are queued per (method, path). Each call pops the next one; the
    last queued response keeps answering once the queue is down to one entry.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = defaultdict(list)
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses):
        self.routes[(method, path)].extend(responses)

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if (r.method, self._path(r)) == (method, path))

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix(VENDOR_PATH_PREFIX)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, self._path(request)))
        if not queue:
            return httpx.Response(404, json={"message": "no route"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)


def provider(name="UMBRA", status="COMPLETE", score=0.9, opportunities=0) -> dict:
    return {
        "provider": name,
        "status": status,
        "score": score,
        "opportunities": [
            {"windowStart": "2026-10-20T00:00:00Z", "providerWindowId": f"{name}-{i}"}
            for i in range(opportunities)
        ],
    }


def feasibility_body(
    feasibility_id="feas-1", score=-1.0, weather=0.8, providers=None
) -> dict:
    return {
        "id": feasibility_id,
        "validUntil": "2026-10-30T00:00:00Z",
        "overallScore": {
            "feasibility": score,
            "weatherScore": {"weatherScore": weather, "weatherDetails": None},
            "providerScore": {"score": 0.0, "providerScores": providers or []},
        },
    }


def order_body(order_id="order-1", status="PENDING", **extra) -> dict:
    return {"id": order_id, "orderType": "TASKING", "status": status, **extra}


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def vendor() -> FakeVendor:
    return FakeVendor()


@pytest.fixture()
def sleeps() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def imagery_client(vendor: FakeVendor, sleeps: RecordingSleep) -> ImageryApiClient:
    return ImageryApiClient(
        api_key="test-key",
        base_url=VENDOR_BASE_URL,
        retry_attempts=3,
        retry_delay=1.0,
        transport=vendor.transport,
        sleep=sleeps,
    )


@pytest.fixture()
def tool_context(imagery_client: ImageryApiClient, sleeps: RecordingSleep) -> ToolContext:
    return ToolContext(
        client=imagery_client,
        sleep=sleeps,
        feasibility_poll_attempts=10,
        feasibility_poll_interval=3.0,
        bulk_feasibility_delay=0.25,
        bulk_order_delay=0.5,
    )


@pytest.fixture()
def registry(tool_context: ToolContext):
    return build_registry(lambda: tool_context)


@pytest.fixture()
async def async_client(registry) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_registry] = lambda: registry
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as c:
        yield c
    app.dependency_overrides.clear()
