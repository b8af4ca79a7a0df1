"""
Named tools callable by an external agent.

Each tool owns a pydantic argument model and an async handler. `ToolRegistry.call`
never raises: every outcome is a plain dict with a `success` flag and either the
handler's payload or a structured error.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from geotasker.clients.imagery_api import ImageryApiClient, Sleep
from geotasker.core.config import GlobalConfig, config
from geotasker.core.errors import ErrorCode, GeotaskerError
from geotasker.pipeline.bulk_operations import BulkOrchestrator
from geotasker.pipeline.feasibility_poller import FeasibilityPoller
from geotasker.pipeline.order_poller import OrderStatusPoller

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Everything a handler needs for one call."""

    client: ImageryApiClient
    sleep: Sleep = asyncio.sleep
    feasibility_poll_attempts: int = 10
    feasibility_poll_interval: float = 3.0
    bulk_feasibility_delay: float = 0.25
    bulk_order_delay: float = 0.5

    def feasibility_poller(self) -> FeasibilityPoller:
        return FeasibilityPoller(
            self.client,
            max_attempts=self.feasibility_poll_attempts,
            interval=self.feasibility_poll_interval,
            sleep=self.sleep,
        )

    def order_poller(self) -> OrderStatusPoller:
        return OrderStatusPoller(self.client, sleep=self.sleep)

    def bulk_orchestrator(self) -> BulkOrchestrator:
        return BulkOrchestrator(
            self.client,
            feasibility_poller=self.feasibility_poller(),
            feasibility_delay=self.bulk_feasibility_delay,
            order_delay=self.bulk_order_delay,
            sleep=self.sleep,
        )


def context_from_config(
    settings: GlobalConfig = config, transport=None, sleep: Sleep = asyncio.sleep
) -> ToolContext:
    """
    Build a tool context from application settings.

    Raises:
        ConfigurationError: If no API key is configured
    """
    client = ImageryApiClient(
        api_key=settings.IMAGERY_API_KEY,
        base_url=settings.IMAGERY_API_BASE_URL,
        timeout=settings.IMAGERY_API_TIMEOUT,
        retry_attempts=settings.IMAGERY_API_RETRY_ATTEMPTS,
        retry_delay=settings.IMAGERY_API_RETRY_DELAY,
        transport=transport,
        sleep=sleep,
    )
    return ToolContext(
        client=client,
        sleep=sleep,
        feasibility_poll_attempts=settings.FEASIBILITY_POLL_ATTEMPTS,
        feasibility_poll_interval=settings.FEASIBILITY_POLL_INTERVAL,
        bulk_feasibility_delay=settings.BULK_FEASIBILITY_DELAY,
        bulk_order_delay=settings.BULK_ORDER_DELAY,
    )


Handler = Callable[[ToolContext, Any], Awaitable[dict[str, Any]]]


class ToolError(GeotaskerError):
    """A handler failure with extra top-level fields for the result payload."""

    def __init__(self, cause: GeotaskerError, **annotations: Any):
        super().__init__(cause.code, cause.message, cause.status_code, cause.details)
        self.annotations = annotations


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Handler = field(repr=False)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_model.model_json_schema(by_alias=True),
        }


def error_result(error: GeotaskerError) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "error": error.to_dict()}
    if isinstance(error, ToolError):
        payload.update(error.annotations)
    return payload


def _validation_error(e: ValidationError) -> GeotaskerError:
    problems = [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "arguments",
            "message": err["msg"],
        }
        for err in e.errors(include_url=False)
    ]
    message = "; ".join(f"{p['field']}: {p['message']}" for p in problems)
    return GeotaskerError(
        ErrorCode.INVALID_REQUEST,
        f"Invalid arguments: {message}",
        details={"errors": problems},
    )


class ToolRegistry:
    def __init__(self, context_factory: Callable[[], ToolContext] = context_from_config):
        self.context_factory = context_factory
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool):
        if tool.name in self._tools:
            raise ValueError(f"Tool {tool.name} is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.describe() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    async def call(self, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Validate arguments, build a context and run the named tool.

        Returns:
            `{"success": True, ...}` on success, otherwise
            `{"success": False, "error": {"code", "message", ...}, ...}`
        """
        tool = self._tools.get(name)
        if tool is None:
            return error_result(
                GeotaskerError(ErrorCode.TOOL_NOT_FOUND, f"Tool {name} not found")
            )

        try:
            parsed = tool.args_model.model_validate(args or {})
        except ValidationError as e:
            logger.info(f"Rejected arguments for {name}: {e.error_count()} error(s)")
            return error_result(_validation_error(e))

        try:
            context = self.context_factory()
            return await tool.handler(context, parsed)
        except GeotaskerError as e:
            logger.warning(f"Tool {name} failed: {e.code} - {e.message}")
            return error_result(e)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return error_result(
                GeotaskerError(
                    ErrorCode.INTERNAL_ERROR, str(e) or "Unknown error occurred"
                )
            )
