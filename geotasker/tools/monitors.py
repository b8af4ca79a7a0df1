from typing import Any

from geotasker.core.errors import ImageryApiError
from geotasker.models.imagery import CreateMonitorRequest
from geotasker.models.schemas import CreateMonitorArgs, MonitorIdArgs, NoArgs
from geotasker.tools.registry import Tool, ToolContext, ToolError
from geotasker.tools.troubleshooting import request_troubleshooting


async def create_monitor(ctx: ToolContext, args: CreateMonitorArgs) -> dict[str, Any]:
    request = CreateMonitorRequest(
        aoi=args.location,
        webhook_url=str(args.webhook_url),
        gsd_min=args.gsd_min,
        gsd_max=args.gsd_max,
        product_type=args.product_type,
    )
    try:
        monitor = await ctx.client.create_monitor(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {
        "success": True,
        "monitor": monitor.to_wire(),
        "message": f"Monitor {monitor.id} created; new imagery will be posted to the webhook.",
    }


async def list_monitors(ctx: ToolContext, args: NoArgs) -> dict[str, Any]:
    try:
        response = await ctx.client.list_monitors()
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    monitors = [m.to_wire() for m in response.notifications]
    return {
        "success": True,
        "monitors": monitors,
        "total": response.total if response.total is not None else len(monitors),
    }


async def get_monitor(ctx: ToolContext, args: MonitorIdArgs) -> dict[str, Any]:
    try:
        monitor = await ctx.client.get_monitor(args.monitor_id)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {"success": True, "monitor": monitor.to_wire()}


async def delete_monitor(ctx: ToolContext, args: MonitorIdArgs) -> dict[str, Any]:
    try:
        await ctx.client.delete_monitor(args.monitor_id)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {"success": True, "message": f"Monitor {args.monitor_id} deleted"}


TOOLS = [
    Tool(
        name="create_monitor",
        description=(
            "Watch an area for new archive imagery and notify a webhook when it appears."
        ),
        args_model=CreateMonitorArgs,
        handler=create_monitor,
    ),
    Tool(
        name="list_monitors",
        description="List active area monitors.",
        args_model=NoArgs,
        handler=list_monitors,
    ),
    Tool(
        name="get_monitor",
        description="Get a single area monitor.",
        args_model=MonitorIdArgs,
        handler=get_monitor,
    ),
    Tool(
        name="delete_monitor",
        description="Delete an area monitor.",
        args_model=MonitorIdArgs,
        handler=delete_monitor,
    ),
]
