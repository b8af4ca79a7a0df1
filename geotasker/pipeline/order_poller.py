"""Wait for an order to reach a terminal lifecycle state."""

import asyncio
import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from geotasker.clients.imagery_api import ImageryApiClient, Sleep
from geotasker.core.errors import GeotaskerError, InvalidRequestError
from geotasker.models.imagery import Order, OrderStatus

logger = logging.getLogger(__name__)

MIN_ATTEMPTS, MAX_ATTEMPTS = 1, 100
MIN_INTERVAL_SECONDS, MAX_INTERVAL_SECONDS = 5, 300
DEFAULT_ATTEMPTS = 10
DEFAULT_INTERVAL_SECONDS = 30


class StatusHistoryEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    status: OrderStatus
    timestamp: datetime
    progress: float | None = None


class OrderPollOutcome(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    completed: bool
    order: Order
    attempts: int
    history: list[StatusHistoryEntry]
    message: str
    suggestion: str | None = None


class OrderPollingError(GeotaskerError):
    """A status fetch failed mid-poll; carries the history collected so far."""

    def __init__(self, cause: GeotaskerError, history: list[StatusHistoryEntry]):
        super().__init__(cause.code, cause.message, cause.status_code, cause.details)
        self.cause = cause
        self.history = history


def validate_poll_bounds(order_id: str, max_attempts: int, interval_seconds: float):
    if not order_id or not order_id.strip():
        raise InvalidRequestError("Order ID is required")
    if not MIN_ATTEMPTS <= max_attempts <= MAX_ATTEMPTS:
        raise InvalidRequestError(
            f"maxAttempts must be between {MIN_ATTEMPTS} and {MAX_ATTEMPTS}"
        )
    if not MIN_INTERVAL_SECONDS <= interval_seconds <= MAX_INTERVAL_SECONDS:
        raise InvalidRequestError(
            f"intervalSeconds must be between {MIN_INTERVAL_SECONDS} and {MAX_INTERVAL_SECONDS}"
        )


class OrderStatusPoller:
    def __init__(self, client: ImageryApiClient, sleep: Sleep = asyncio.sleep):
        self.client = client
        self.sleep = sleep

    async def wait_for_completion(
        self,
        order_id: str,
        max_attempts: int = DEFAULT_ATTEMPTS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> OrderPollOutcome:
        """
        Poll an order until it is COMPLETED, DELIVERED, FAILED or CANCELLED.

        Args:
            order_id: Order to watch
            max_attempts: Number of status fetches (1-100)
            interval_seconds: Wait between fetches (5-300)

        Returns:
            OrderPollOutcome; `completed` is False when attempts ran out

        Raises:
            InvalidRequestError: If the bounds are out of range
            OrderPollingError: If a status fetch fails
        """
        validate_poll_bounds(order_id, max_attempts, interval_seconds)
        order_id = order_id.strip()
        history: list[StatusHistoryEntry] = []

        for attempt in range(1, max_attempts + 1):
            try:
                order = await self.client.get_order_status(order_id)
            except GeotaskerError as e:
                logger.warning(
                    f"Polling order {order_id} failed on attempt {attempt}: {e.code}"
                )
                raise OrderPollingError(e, history) from e

            history.append(
                StatusHistoryEntry(
                    status=order.status,
                    timestamp=datetime.now(UTC),
                    progress=order.progress,
                )
            )

            if order.status.is_terminal:
                logger.info(
                    f"Order {order_id} reached {order.status} after {attempt} attempt(s)"
                )
                return OrderPollOutcome(
                    completed=True,
                    order=order,
                    attempts=attempt,
                    history=history,
                    message=f"Order {order_id} reached terminal state {order.status}",
                )

            if attempt < max_attempts:
                await self.sleep(interval_seconds)

        logger.info(f"Order {order_id} still {order.status} after {max_attempts} attempts")
        return OrderPollOutcome(
            completed=False,
            order=order,
            attempts=max_attempts,
            history=history,
            message=(
                f"Order {order_id} did not reach terminal state after "
                f"{max_attempts} attempts (last status: {order.status})"
            ),
            suggestion=(
                "Increase maxAttempts or intervalSeconds to wait longer, "
                "or check again later with get_order_status"
            ),
        )
