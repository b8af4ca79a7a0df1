import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException

from geotasker.api.deps import RegistryDep

router = APIRouter(prefix="/tools", tags=["Tools"])
logger = logging.getLogger(__name__)


@router.get("", summary="List available tools")
def list_tools(registry: RegistryDep):
    return {"tools": registry.list_tools()}


@router.post(
    "/{name}",
    summary="Call a tool",
    description="Run a tool with the given arguments and return its result object",
)
async def call_tool(
    name: str,
    registry: RegistryDep,
    arguments: dict[str, Any] | None = Body(default=None),
):
    """
    Tool failures are reported inside the result (`success: false`), so any
    tool that exists answers 200.
    """
    if not registry.has(name):
        raise HTTPException(status_code=404, detail=f"tool {name} is not found")
    logger.info(f"Calling tool {name}")
    return await registry.call(name, arguments)
