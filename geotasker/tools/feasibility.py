import logging
from typing import Any

from geotasker.core.errors import ImageryApiError, InvalidRequestError
from geotasker.models.imagery import FeasibilityRequest, FeasibilityResult, PricingRequest
from geotasker.models.schemas import FeasibilityArgs, PricingArgs
from geotasker.pipeline.feasibility_poller import is_feasible
from geotasker.tools.registry import Tool, ToolContext, ToolError
from geotasker.tools.troubleshooting import (
    WindowAnalysis,
    analyze_window,
    check_start_date,
    explain_infeasibility,
    needs_alternative,
    recommended_alternative,
    request_troubleshooting,
)
from geotasker.utils import parse_datetime

logger = logging.getLogger(__name__)


async def get_pricing_estimate(ctx: ToolContext, args: PricingArgs) -> dict[str, Any]:
    try:
        response = await ctx.client.get_pricing(PricingRequest(aoi=args.location))
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {"success": True, "pricing": response.to_wire()}


def format_feasibility(
    result: FeasibilityResult, args: FeasibilityArgs, window: WindowAnalysis
) -> dict[str, Any]:
    """Flatten a feasibility result and add guidance for the caller."""
    feasible = is_feasible(result)
    feasibility: dict[str, Any] = {
        "feasible": feasible,
        "feasibilityId": result.id,
        "validUntil": result.valid_until,
        "scores": {
            "overall": result.feasibility_score,
            "weather": result.weather_score,
            "provider": result.overall_score.provider_score.score,
        },
        "windowDuration": f"{window.days} days",
        "weatherDetails": result.overall_score.weather_score.weather_details,
        "providers": [
            {
                "provider": p.provider,
                "score": p.score,
                "status": p.status.value,
                "opportunityCount": len(p.opportunities),
                "opportunities": [o.to_wire() for o in p.opportunities],
            }
            for p in result.providers
        ],
    }
    if window.short:
        feasibility["windowWarning"] = window.suggestion

    if feasible:
        feasibility["message"] = (
            f"Order is feasible with {result.opportunity_count} capture opportunity(s)"
        )
        if window.short:
            feasibility["recommendation"] = (
                "Consider extending your capture window to 30-60 days for more "
                "opportunities and flexibility."
            )
        return feasibility

    reason, suggestions = explain_infeasibility(result, args.product_type, window)
    feasibility["reason"] = reason
    feasibility["suggestions"] = suggestions
    if needs_alternative(result, args.product_type):
        feasibility["recommendedAlternative"] = recommended_alternative()
    return feasibility


async def check_order_feasibility(
    ctx: ToolContext, args: FeasibilityArgs
) -> dict[str, Any]:
    start = check_start_date(args.start_date)
    end = parse_datetime(args.end_date)
    if end <= start:
        raise InvalidRequestError("endDate must be after startDate")
    window = analyze_window(start, end)

    request = FeasibilityRequest(
        aoi=args.location,
        product_type=args.product_type,
        resolution=args.resolution,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        max_cloud_coverage_percent=args.max_cloud_coverage_percent,
        required_provider=args.required_provider,
    )
    try:
        result = await ctx.feasibility_poller().check(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e

    return {"success": True, "feasibility": format_feasibility(result, args, window)}


TOOLS = [
    Tool(
        name="get_pricing_estimate",
        description=(
            "Get pricing for every product type and resolution, optionally for a "
            "specific area of interest."
        ),
        args_model=PricingArgs,
        handler=get_pricing_estimate,
    ),
    Tool(
        name="check_order_feasibility",
        description=(
            "Check whether a tasking order can be fulfilled for a location and capture "
            "window. Waits for provider results and explains infeasible outcomes. "
            "The start date must be within 14 days of today."
        ),
        args_model=FeasibilityArgs,
        handler=check_order_feasibility,
    ),
]
