"""
Run feasibility checks or tasking orders across many locations.

Locations are processed one at a time, in input order, so vendor rate limits
are respected and progress reporting stays deterministic. A failure for one
location is recorded in its result and never aborts the batch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from geotasker.clients.imagery_api import ImageryApiClient, Sleep
from geotasker.core.errors import (
    ConfirmationRequiredError,
    ErrorCode,
    GeotaskerError,
    InvalidRequestError,
)
from geotasker.models.bulk import (
    MAX_BATCH_SIZE,
    BatchError,
    BatchProgress,
    BatchReport,
    BatchResult,
    BulkFeasibilityRequest,
    BulkOrderRequest,
    FeasibilityOutcome,
    Location,
)
from geotasker.models.imagery import (
    DEFAULT_DELIVERY_BUCKET,
    DeliveryParams,
    FeasibilityRequest,
    Order,
    PlaceTaskingOrderRequest,
)
from geotasker.pipeline.feasibility_poller import FeasibilityPoller, is_feasible
from geotasker.utils import to_iso_datetime, to_wkt

logger = logging.getLogger(__name__)

T = TypeVar("T")

FEASIBILITY_DELAY = 0.25
ORDER_DELAY = 0.5

ProgressCallback = Callable[[BatchProgress], None]


def validate_locations(locations: list[Location]):
    """
    Reject a batch before any vendor call is made.

    Raises:
        InvalidRequestError: If the list is empty, too long or has duplicate ids
    """
    if not locations:
        raise InvalidRequestError(
            "locations array is required and must contain at least one location"
        )
    if len(locations) > MAX_BATCH_SIZE:
        raise InvalidRequestError(
            f"Too many locations: {len(locations)}. Maximum is {MAX_BATCH_SIZE} per request."
        )
    seen: set[str] = set()
    duplicates: set[str] = set()
    for location in locations:
        if location.id in seen:
            duplicates.add(location.id)
        seen.add(location.id)
    if duplicates:
        raise InvalidRequestError(
            f"Location ids must be unique within a batch, duplicated: {sorted(duplicates)}"
        )


def to_batch_error(error: Exception) -> BatchError:
    if isinstance(error, GeotaskerError):
        return BatchError(code=error.code, message=error.message)
    return BatchError(
        code=ErrorCode.INTERNAL_ERROR,
        message=str(error) or "Unknown error occurred",
    )


class BulkOrchestrator:
    """
    Drives the imagery client sequentially over a list of locations.

    - Validate the batch up front
    - Process each location, isolating its failure
    - Report an immutable progress value before and after every location
    """

    def __init__(
        self,
        client: ImageryApiClient,
        feasibility_poller: FeasibilityPoller | None = None,
        feasibility_delay: float = FEASIBILITY_DELAY,
        order_delay: float = ORDER_DELAY,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.feasibility_poller = feasibility_poller or FeasibilityPoller(
            client, sleep=sleep
        )
        self.feasibility_delay = feasibility_delay
        self.order_delay = order_delay
        self.sleep = sleep

    async def run_feasibility(
        self,
        request: BulkFeasibilityRequest,
        on_progress: ProgressCallback | None = None,
    ) -> BatchReport[FeasibilityOutcome]:
        """
        Check feasibility for every location in the request.

        Args:
            request: Shared capture parameters plus the list of locations
            on_progress: Called with a progress value before and after each location

        Returns:
            One result per location, in input order, plus the final progress

        Raises:
            InvalidRequestError: If the batch itself is invalid
        """
        validate_locations(request.locations)
        start_date = to_iso_datetime(request.start_date)
        end_date = to_iso_datetime(request.end_date)

        async def check(location: Location) -> FeasibilityOutcome:
            result = await self.feasibility_poller.check(
                FeasibilityRequest(
                    aoi=to_wkt(location.location),
                    product_type=request.product_type,
                    resolution=request.resolution,
                    start_date=start_date,
                    end_date=end_date,
                    max_cloud_coverage_percent=request.max_cloud_coverage_percent,
                    required_provider=request.required_provider,
                )
            )
            return FeasibilityOutcome(
                feasible=is_feasible(result),
                feasibility_score=result.feasibility_score,
                weather_score=result.weather_score,
                opportunity_count=result.opportunity_count,
                details=result,
            )

        return await self._run(
            "feasibility",
            request.locations,
            check,
            FeasibilityOutcome,
            self.feasibility_delay,
            on_progress,
        )

    async def place_orders(
        self,
        request: BulkOrderRequest,
        on_progress: ProgressCallback | None = None,
    ) -> BatchReport[Order]:
        """
        Place a tasking order for every location in the request.

        Bulk ordering has real financial effect, so a confirmation token is
        required before anything is processed.

        Raises:
            ConfirmationRequiredError: If no confirmation token was supplied
            InvalidRequestError: If the batch itself is invalid
        """
        if not request.confirmation_token or not request.confirmation_token.strip():
            raise ConfirmationRequiredError(
                "Bulk ordering requires explicit user confirmation. "
                "Please provide a confirmationToken."
            )
        validate_locations(request.locations)
        window_start = to_iso_datetime(request.start_date)
        window_end = to_iso_datetime(request.end_date)
        delivery = request.delivery_config or DeliveryParams(
            bucket=DEFAULT_DELIVERY_BUCKET
        )

        async def order(location: Location) -> Order:
            return await self.client.place_tasking_order(
                PlaceTaskingOrderRequest(
                    aoi=to_wkt(location.location),
                    window_start=window_start,
                    window_end=window_end,
                    product_type=request.product_type,
                    resolution=request.resolution,
                    delivery_driver="S3",
                    delivery_params=delivery,
                    max_cloud_coverage_percent=request.max_cloud_coverage_percent,
                    required_provider=request.required_provider,
                    metadata=location.metadata,
                )
            )

        return await self._run(
            "order", request.locations, order, Order, self.order_delay, on_progress
        )

    async def _run(
        self,
        operation: str,
        locations: list[Location],
        process: Callable[[Location], Awaitable[T]],
        result_type: type[T],
        delay: float,
        on_progress: ProgressCallback | None,
    ) -> BatchReport[T]:
        progress = BatchProgress.initial(len(locations))
        progress_log: list[BatchProgress] = []
        result_model = BatchResult[result_type]
        results: list[BatchResult[T]] = []

        def report(value: BatchProgress):
            progress_log.append(value)
            if on_progress is not None:
                on_progress(value)

        logger.info(f"Starting bulk {operation} for {len(locations)} location(s)")
        for index, location in enumerate(locations):
            progress = progress.start(location.label)
            report(progress)

            try:
                outcome = await process(location)
            except Exception as e:
                if not isinstance(e, GeotaskerError):
                    logger.exception(
                        f"Unexpected error during bulk {operation} for {location.id}"
                    )
                error = to_batch_error(e)
                logger.warning(
                    f"Bulk {operation} failed for {location.id}: {error.code} - {error.message}"
                )
                results.append(
                    result_model(
                        location_id=location.id,
                        location_name=location.name,
                        success=False,
                        error=error,
                    )
                )
                progress = progress.record_failure()
            else:
                results.append(
                    result_model(
                        location_id=location.id,
                        location_name=location.name,
                        success=True,
                        result=outcome,
                    )
                )
                progress = progress.record_success()

            report(progress)
            logger.info(
                f"Bulk {operation} progress: {progress.completed}/{progress.total} "
                f"({progress.successful} success, {progress.failed} failed) - {location.label}"
            )

            if index < len(locations) - 1:
                await self.sleep(delay)

        return BatchReport[result_type](
            results=results, progress=progress, progress_log=progress_log
        )
