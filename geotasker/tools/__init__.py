from collections.abc import Callable

from geotasker.tools import archives, bulk, feasibility, monitors, orders
from geotasker.tools.registry import (
    Tool,
    ToolContext,
    ToolError,
    ToolRegistry,
    context_from_config,
)


def build_registry(
    context_factory: Callable[[], ToolContext] = context_from_config,
) -> ToolRegistry:
    """Registry with every tool the service exposes."""
    registry = ToolRegistry(context_factory)
    for module in (archives, feasibility, orders, monitors, bulk):
        for tool in module.TOOLS:
            registry.register(tool)
    return registry


__all__ = [
    "Tool",
    "ToolContext",
    "ToolError",
    "ToolRegistry",
    "build_registry",
    "context_from_config",
]
