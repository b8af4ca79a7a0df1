"""Imagery vendor API client for making HTTP requests."""

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from geotasker.core.errors import (
    STATUS_ERROR_CODES,
    ConfigurationError,
    ErrorCode,
    ImageryApiError,
)
from geotasker.models.imagery import (
    ArchiveResult,
    CreateMonitorRequest,
    FeasibilityRequest,
    FeasibilityResult,
    ListMonitorsResponse,
    ListOrdersRequest,
    ListOrdersResponse,
    Monitor,
    Order,
    PlaceArchiveOrderRequest,
    PlaceTaskingOrderRequest,
    PricingRequest,
    PricingResponse,
    SearchArchiveRequest,
    SearchArchiveResponse,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Skyfi-Api-Key"
DEFAULT_BASE_URL = "https://app.skyfi.com/platform-api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0

Sleep = Callable[[float], Awaitable[None]]
ModelT = TypeVar("ModelT", bound=BaseModel)


class ImageryApiClient:
    """
    Low-level client for the imagery vendor API.

    Handles authentication, failure classification and retries.
    Does NOT contain polling or batch logic.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the imagery API client.

        Args:
            api_key: Vendor API key, sent as a header on every request
            base_url: Vendor API base URL
            timeout: Per-request timeout in seconds
            retry_attempts: Total attempts per operation, including the first
            retry_delay: Base backoff delay in seconds, doubled after each attempt
            transport: Optional httpx transport, used by tests
            sleep: Coroutine used for backoff waits

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "IMAGERY_API_KEY is not set; configure an API key before calling the imagery API"
            )
        if retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.transport = transport
        self.sleep = sleep
        self._request_ids = itertools.count(1)

    # ==================== Archive Search ====================

    async def search_archive(
        self, request: SearchArchiveRequest
    ) -> SearchArchiveResponse:
        data = await self._request("POST", "/archives", json=request.to_wire())
        return self._parse(SearchArchiveResponse, data)

    async def get_archives_page(self, page: str) -> SearchArchiveResponse:
        """Fetch the next page of a search using its pagination token."""
        data = await self._request("GET", "/archives", params={"page": page})
        return self._parse(SearchArchiveResponse, data)

    async def get_archive(self, archive_id: str) -> ArchiveResult:
        data = await self._request("GET", f"/archives/{archive_id}")
        return self._parse(ArchiveResult, data)

    # ==================== Pricing ====================

    async def get_pricing(self, request: PricingRequest) -> PricingResponse:
        data = await self._request("POST", "/pricing", json=request.to_wire())
        return self._parse(PricingResponse, data)

    # ==================== Feasibility ====================

    async def check_feasibility(self, request: FeasibilityRequest) -> FeasibilityResult:
        """
        Submit a feasibility check.

        The vendor evaluates feasibility asynchronously, so the returned result
        may still be pending; see FeasibilityPoller for the blocking variant.
        """
        data = await self._request("POST", "/feasibility", json=request.to_wire())
        return self._parse(FeasibilityResult, data)

    async def get_feasibility_status(self, feasibility_id: str) -> FeasibilityResult:
        data = await self._request("GET", f"/feasibility/{feasibility_id}")
        return self._parse(FeasibilityResult, data)

    # ==================== Orders ====================

    async def place_archive_order(self, request: PlaceArchiveOrderRequest) -> Order:
        data = await self._request("POST", "/order-archive", json=request.to_wire())
        return self._parse(Order, data)

    async def place_tasking_order(self, request: PlaceTaskingOrderRequest) -> Order:
        data = await self._request("POST", "/order-tasking", json=request.to_wire())
        return self._parse(Order, data)

    async def get_order_status(self, order_id: str) -> Order:
        data = await self._request("GET", f"/orders/{order_id}")
        return self._parse(Order, data)

    async def list_orders(
        self, request: ListOrdersRequest | None = None
    ) -> ListOrdersResponse:
        params = request.to_wire() if request else None
        data = await self._request("GET", "/orders", params=params)
        return self._parse(ListOrdersResponse, data)

    # ==================== Notifications/Monitors ====================

    async def create_monitor(self, request: CreateMonitorRequest) -> Monitor:
        data = await self._request("POST", "/notifications", json=request.to_wire())
        return self._parse(Monitor, data)

    async def list_monitors(self) -> ListMonitorsResponse:
        data = await self._request("GET", "/notifications")
        return self._parse(ListMonitorsResponse, data)

    async def get_monitor(self, monitor_id: str) -> Monitor:
        data = await self._request("GET", f"/notifications/{monitor_id}")
        return self._parse(Monitor, data)

    async def delete_monitor(self, monitor_id: str) -> None:
        await self._request("DELETE", f"/notifications/{monitor_id}")

    # ==================== Transport ====================

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Perform one logical API operation with retries.

        Client errors (4xx) are raised immediately. Network errors and 5xx
        responses are retried with exponential backoff, and the last error is
        re-raised once all attempts are used.

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            ImageryApiError: If the operation ultimately fails
        """
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return await self._send(method, path, json=json, params=params)
            except ImageryApiError as e:
                if e.is_client_error or attempt == self.retry_attempts:
                    raise
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(
                    f"{method} {path} failed with {e.code} "
                    f"(attempt {attempt}/{self.retry_attempts}), retrying in {delay:.2f}s"
                )
                await self.sleep(delay)

    async def _send(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        request_id = next(self._request_ids)
        logger.debug(f"[req {request_id}] {method} {path}")
        if json is not None:
            logger.debug(f"[req {request_id}] request body: {json}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
                headers={
                    API_KEY_HEADER: self.api_key,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            ) as client:
                response = await client.request(method, path, json=json, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._classify_response(request_id, e.response) from e
        except httpx.TransportError as e:
            logger.warning(f"[req {request_id}] network error: {e!r}")
            raise ImageryApiError(
                ErrorCode.NETWORK_ERROR,
                "Network error: unable to reach the imagery API",
                0,
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"[req {request_id}] request error: {e!r}")
            raise ImageryApiError(ErrorCode.REQUEST_ERROR, str(e), 0) from e

        logger.debug(f"[req {request_id}] response {response.status_code}")
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        """Validate a decoded body, classifying a malformed one as INTERNAL_ERROR."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Unexpected {model.__name__} payload: {e.error_count()} error(s)")
            raise ImageryApiError(
                ErrorCode.INTERNAL_ERROR,
                f"Imagery API returned an unexpected {model.__name__} payload",
                0,
                {"errors": [err["msg"] for err in e.errors()]},
            ) from e

    @staticmethod
    def _classify_response(request_id: int, response: httpx.Response) -> ImageryApiError:
        """Map a non-2xx response and its {code, message, details} envelope to an error."""
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        code = body.get("code") or STATUS_ERROR_CODES.get(status, ErrorCode.API_ERROR)
        message = body.get("message") or (
            f"Imagery API returned {status} {response.reason_phrase}".strip()
        )
        details = body.get("details") if isinstance(body.get("details"), dict) else None
        logger.info(f"[req {request_id}] error {status}: {code} - {message}")
        return ImageryApiError(code, message, status, details)
