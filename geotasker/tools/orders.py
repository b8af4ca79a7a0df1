import logging
from typing import Any

from geotasker.core.errors import ImageryApiError
from geotasker.models.imagery import (
    DeliveryParams,
    ListOrdersRequest,
    Order,
    PlaceArchiveOrderRequest,
    PlaceTaskingOrderRequest,
)
from geotasker.models.schemas import (
    ListOrdersArgs,
    OrderStatusArgs,
    PlaceArchiveOrderArgs,
    PlaceTaskingOrderArgs,
    PollOrderStatusArgs,
)
from geotasker.pipeline.order_poller import OrderPollingError
from geotasker.tools.registry import Tool, ToolContext, ToolError
from geotasker.tools.troubleshooting import (
    order_troubleshooting,
    request_troubleshooting,
    status_description,
)

logger = logging.getLogger(__name__)


def _delivery(bucket: str | None, path: str | None) -> DeliveryParams | None:
    if not bucket:
        return None
    return DeliveryParams(bucket=bucket, path=path)


def order_payload(order: Order) -> dict[str, Any]:
    payload = order.to_wire()
    payload["statusDescription"] = status_description(order.status)
    return payload


async def place_archive_order(
    ctx: ToolContext, args: PlaceArchiveOrderArgs
) -> dict[str, Any]:
    delivery = _delivery(args.delivery_bucket, args.delivery_path)
    request = PlaceArchiveOrderRequest(
        archive_id=args.archive_id,
        aoi=args.location,
        delivery_driver="S3" if delivery else None,
        delivery_params=delivery,
    )
    try:
        order = await ctx.client.place_archive_order(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=order_troubleshooting(e)) from e

    logger.info(f"Placed archive order {order.id} for archive {args.archive_id}")
    return {
        "success": True,
        "order": order_payload(order),
        "message": f"Archive order {order.id} placed. Use get_order_status to track it.",
    }


async def place_tasking_order(
    ctx: ToolContext, args: PlaceTaskingOrderArgs
) -> dict[str, Any]:
    request = PlaceTaskingOrderRequest(
        aoi=args.location,
        window_start=args.date_from,
        window_end=args.date_to,
        product_type=args.product_type,
        resolution=args.resolution,
        max_cloud_coverage_percent=args.cloud_cover_max,
        max_off_nadir_angle=args.off_nadir_max,
        required_provider=args.required_provider,
        provider_window_id=args.provider_window_id,
    )
    delivery = _delivery(args.delivery_bucket, args.delivery_path)
    if delivery:
        request.delivery_params = delivery

    try:
        order = await ctx.client.place_tasking_order(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=order_troubleshooting(e)) from e

    logger.info(f"Placed tasking order {order.id}")
    return {
        "success": True,
        "order": order_payload(order),
        "message": f"Tasking order {order.id} placed. Use poll_order_status to wait for delivery.",
    }


async def get_order_status(ctx: ToolContext, args: OrderStatusArgs) -> dict[str, Any]:
    try:
        order = await ctx.client.get_order_status(args.order_id)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {"success": True, "order": order_payload(order)}


async def poll_order_status(
    ctx: ToolContext, args: PollOrderStatusArgs
) -> dict[str, Any]:
    try:
        outcome = await ctx.order_poller().wait_for_completion(
            args.order_id or "",
            max_attempts=args.max_attempts,
            interval_seconds=args.interval_seconds,
        )
    except OrderPollingError as e:
        history = [entry.model_dump(by_alias=True, mode="json") for entry in e.history]
        raise ToolError(
            e, polling={"attempts": len(history) + 1, "statusHistory": history}
        ) from e

    payload: dict[str, Any] = {
        "success": True,
        "completed": outcome.completed,
        "order": order_payload(outcome.order),
        "polling": {
            "attempts": outcome.attempts,
            "statusHistory": [
                entry.model_dump(by_alias=True, mode="json") for entry in outcome.history
            ],
        },
        "message": outcome.message,
    }
    if outcome.suggestion:
        payload["suggestion"] = outcome.suggestion
    return payload


async def list_orders(ctx: ToolContext, args: ListOrdersArgs) -> dict[str, Any]:
    request = ListOrdersRequest(
        type=args.type, status=args.status, limit=args.limit, offset=args.offset
    )
    try:
        response = await ctx.client.list_orders(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e

    orders = [order_payload(order) for order in response.orders]
    return {
        "success": True,
        "orders": orders,
        "count": len(orders),
        "total": response.total if response.total is not None else len(orders),
        "hasMore": bool(response.has_more),
    }


TOOLS = [
    Tool(
        name="place_archive_order",
        description=(
            "Order an existing archive capture. This charges the account; confirm "
            "with the user before calling."
        ),
        args_model=PlaceArchiveOrderArgs,
        handler=place_archive_order,
    ),
    Tool(
        name="place_tasking_order",
        description=(
            "Order a new satellite capture over a location and time window. This "
            "charges the account; run check_order_feasibility and confirm with the "
            "user first."
        ),
        args_model=PlaceTaskingOrderArgs,
        handler=place_tasking_order,
    ),
    Tool(
        name="get_order_status",
        description="Get the current status of an order.",
        args_model=OrderStatusArgs,
        handler=get_order_status,
    ),
    Tool(
        name="poll_order_status",
        description=(
            "Wait for an order to reach COMPLETED, DELIVERED, FAILED or CANCELLED. "
            "maxAttempts is 1-100 and intervalSeconds is 5-300."
        ),
        args_model=PollOrderStatusArgs,
        handler=poll_order_status,
    ),
    Tool(
        name="list_orders",
        description="List orders, optionally filtered by type and status.",
        args_model=ListOrdersArgs,
        handler=list_orders,
    ),
]
