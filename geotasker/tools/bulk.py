import logging
from typing import Any

from geotasker.models.bulk import BatchReport, BulkFeasibilityRequest, BulkOrderRequest
from geotasker.pipeline.summaries import summarize_feasibility, summarize_orders
from geotasker.tools.registry import Tool, ToolContext

logger = logging.getLogger(__name__)


def _report_payload(report: BatchReport, summary) -> dict[str, Any]:
    return {
        "success": True,
        "summary": summary.model_dump(by_alias=True),
        "results": [result.to_wire() for result in report.results],
        "progress": report.progress.to_wire(),
    }


async def bulk_feasibility_check(
    ctx: ToolContext, args: BulkFeasibilityRequest
) -> dict[str, Any]:
    report = await ctx.bulk_orchestrator().run_feasibility(args)
    summary = summarize_feasibility(report.results)
    logger.info(
        f"Bulk feasibility finished: {summary.feasible} feasible, "
        f"{summary.infeasible} infeasible, {summary.errors} error(s)"
    )
    return _report_payload(report, summary)


async def bulk_order_with_confirmation(
    ctx: ToolContext, args: BulkOrderRequest
) -> dict[str, Any]:
    report = await ctx.bulk_orchestrator().place_orders(args)
    summary = summarize_orders(report.results)
    logger.info(
        f"Bulk order finished: {summary.successful} placed, {summary.failed} failed"
    )
    return _report_payload(report, summary)


TOOLS = [
    Tool(
        name="bulk_feasibility_check",
        description=(
            "Check tasking feasibility for up to 100 locations with shared capture "
            "parameters. Locations are processed one at a time; a failure for one "
            "location does not stop the others."
        ),
        args_model=BulkFeasibilityRequest,
        handler=bulk_feasibility_check,
    ),
    Tool(
        name="bulk_order_with_confirmation",
        description=(
            "Place tasking orders for up to 100 locations. This charges the account "
            "for every location; a confirmationToken obtained from the user is required."
        ),
        args_model=BulkOrderRequest,
        handler=bulk_order_with_confirmation,
    ),
]
