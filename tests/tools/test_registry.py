import pytest
from pydantic import BaseModel

from conftest import order_body
from geotasker.core import config as settings_module
from geotasker.core.errors import ErrorCode
from geotasker.tools import Tool, ToolRegistry, build_registry, context_from_config

EXPECTED_TOOLS = {
    "search_archive",
    "get_archives_page",
    "get_archive",
    "get_pricing_estimate",
    "check_order_feasibility",
    "place_archive_order",
    "place_tasking_order",
    "get_order_status",
    "poll_order_status",
    "list_orders",
    "create_monitor",
    "list_monitors",
    "get_monitor",
    "delete_monitor",
    "bulk_feasibility_check",
    "bulk_order_with_confirmation",
}


class EchoArgs(BaseModel):
    text: str


async def echo(ctx, args: EchoArgs):
    return {"success": True, "text": args.text}


async def explode(ctx, args: EchoArgs):
    raise RuntimeError("kaboom")


def test_build_registry_registers_every_tool(registry):
    assert len(registry) == len(EXPECTED_TOOLS)
    assert {t["name"] for t in registry.list_tools()} == EXPECTED_TOOLS
    for name in EXPECTED_TOOLS:
        assert registry.has(name)
        assert registry.get(name).name == name


def test_list_tools_includes_camel_case_input_schema(registry):
    described = {t["name"]: t for t in registry.list_tools()}

    schema = described["check_order_feasibility"]["inputSchema"]
    assert {"location", "productType", "resolution", "startDate", "endDate"} <= set(
        schema["required"]
    )
    assert described["check_order_feasibility"]["description"]


def test_duplicate_registration_fails(tool_context):
    registry = ToolRegistry(lambda: tool_context)
    tool = Tool(name="echo", description="Echo", args_model=EchoArgs, handler=echo)
    registry.register(tool)

    with pytest.raises(ValueError):
        registry.register(tool)
    assert len(registry) == 1


@pytest.mark.anyio
async def test_call_runs_handler(tool_context):
    registry = ToolRegistry(lambda: tool_context)
    registry.register(Tool(name="echo", description="Echo", args_model=EchoArgs, handler=echo))

    assert await registry.call("echo", {"text": "hi"}) == {"success": True, "text": "hi"}


@pytest.mark.anyio
async def test_unknown_tool_is_reported_not_raised(registry):
    result = await registry.call("launch_rocket", {})

    assert result["success"] is False
    assert result["error"]["code"] == ErrorCode.TOOL_NOT_FOUND


@pytest.mark.anyio
async def test_invalid_arguments_are_reported(registry, vendor):
    result = await registry.call("get_order_status", {})

    assert result["success"] is False
    assert result["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert result["error"]["details"]["errors"][0]["field"] == "orderId"
    assert vendor.requests == []


@pytest.mark.anyio
async def test_unexpected_exception_becomes_internal_error(tool_context):
    registry = ToolRegistry(lambda: tool_context)
    registry.register(
        Tool(name="explode", description="Fails", args_model=EchoArgs, handler=explode)
    )

    result = await registry.call("explode", {"text": "hi"})

    assert result == {
        "success": False,
        "error": {"code": ErrorCode.INTERNAL_ERROR, "message": "kaboom"},
    }


@pytest.mark.anyio
async def test_missing_api_key_is_a_configuration_error(vendor):
    settings = settings_module.TestConfig(IMAGERY_API_KEY=None)
    registry = build_registry(lambda: context_from_config(settings, transport=vendor.transport))

    result = await registry.call("get_order_status", {"orderId": "order-1"})

    assert result["success"] is False
    assert result["error"]["code"] == ErrorCode.CONFIGURATION_ERROR
    assert vendor.requests == []


@pytest.mark.anyio
async def test_context_from_config_uses_settings(vendor, sleeps):
    settings = settings_module.TestConfig(
        IMAGERY_API_KEY="configured-key",
        IMAGERY_API_BASE_URL="https://vendor.test/platform-api",
    )
    vendor.add("GET", "/orders/order-1", order_body(status="DELIVERED"))
    registry = build_registry(
        lambda: context_from_config(settings, transport=vendor.transport, sleep=sleeps)
    )

    result = await registry.call("get_order_status", {"orderId": "order-1"})

    assert result["success"] is True
    assert result["order"]["status"] == "DELIVERED"
    assert vendor.requests[0].headers["X-Skyfi-Api-Key"] == "configured-key"
