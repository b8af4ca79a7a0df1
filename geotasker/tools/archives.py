import logging
from typing import Any

from geotasker.core.errors import ImageryApiError
from geotasker.models.imagery import SearchArchiveRequest, SearchArchiveResponse
from geotasker.models.schemas import ArchivesPageArgs, GetArchiveArgs, SearchArchiveArgs
from geotasker.tools.registry import Tool, ToolContext, ToolError
from geotasker.tools.troubleshooting import request_troubleshooting

logger = logging.getLogger(__name__)


def _page_payload(response: SearchArchiveResponse) -> dict[str, Any]:
    archives = [archive.to_wire() for archive in response.archives]
    payload: dict[str, Any] = {
        "success": True,
        "archives": archives,
        "count": len(archives),
        "total": response.total if response.total is not None else len(archives),
        "hasMore": response.next_page is not None,
    }
    if response.next_page:
        payload["nextPage"] = response.next_page
    return payload


async def search_archive(ctx: ToolContext, args: SearchArchiveArgs) -> dict[str, Any]:
    request = SearchArchiveRequest(
        aoi=args.location,
        from_date=args.from_date,
        to_date=args.to_date,
        max_cloud_coverage_percent=args.max_cloud_coverage_percent,
        max_off_nadir_angle=args.max_off_nadir_angle,
        resolutions=args.resolutions,
        product_types=args.product_types,
        providers=args.providers,
        open_data=args.open_data,
        page_size=args.page_size,
    )
    try:
        response = await ctx.client.search_archive(request)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e

    logger.info(f"Archive search returned {len(response.archives)} result(s)")
    return _page_payload(response)


async def get_archives_page(ctx: ToolContext, args: ArchivesPageArgs) -> dict[str, Any]:
    try:
        response = await ctx.client.get_archives_page(args.page_hash)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return _page_payload(response)


async def get_archive(ctx: ToolContext, args: GetArchiveArgs) -> dict[str, Any]:
    try:
        archive = await ctx.client.get_archive(args.archive_id)
    except ImageryApiError as e:
        raise ToolError(e, troubleshooting=request_troubleshooting(e)) from e
    return {"success": True, "archive": archive.to_wire()}


TOOLS = [
    Tool(
        name="search_archive",
        description=(
            "Search the imagery archive for existing captures over a location. "
            "Location may be a WKT polygon, a 'lat,lng' pair or GeoJSON."
        ),
        args_model=SearchArchiveArgs,
        handler=search_archive,
    ),
    Tool(
        name="get_archives_page",
        description="Fetch the next page of archive search results using its page token.",
        args_model=ArchivesPageArgs,
        handler=get_archives_page,
    ),
    Tool(
        name="get_archive",
        description="Get full details for a single archive capture.",
        args_model=GetArchiveArgs,
        handler=get_archive,
    ),
]
