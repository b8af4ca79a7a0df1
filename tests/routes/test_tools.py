import pytest
from httpx import AsyncClient

from conftest import order_body

api_url_prefix = "/api/v1"


@pytest.mark.anyio
async def test_ping(async_client: AsyncClient):
    response = await async_client.get("/ping")

    assert response.status_code == 200
    assert response.json()["status"] == "up"


@pytest.mark.anyio
async def test_list_tools(async_client: AsyncClient):
    response = await async_client.get(f"{api_url_prefix}/tools")

    assert response.status_code == 200
    names = [tool["name"] for tool in response.json()["tools"]]
    assert "check_order_feasibility" in names
    assert "bulk_order_with_confirmation" in names


@pytest.mark.anyio
async def test_call_tool(async_client: AsyncClient, vendor):
    vendor.add("GET", "/orders/order-1", order_body(status="PROCESSING"))

    response = await async_client.post(
        f"{api_url_prefix}/tools/get_order_status", json={"orderId": "order-1"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["order"]["status"] == "PROCESSING"


@pytest.mark.anyio
async def test_tool_failure_is_still_200(async_client: AsyncClient, vendor):
    response = await async_client.post(f"{api_url_prefix}/tools/get_order_status", json={})

    assert response.status_code == 200
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


@pytest.mark.anyio
async def test_unknown_tool_is_404(async_client: AsyncClient):
    response = await async_client.post(f"{api_url_prefix}/tools/launch_rocket", json={})

    assert response.status_code == 404
    assert response.json()["detail"] == "tool launch_rocket is not found"
