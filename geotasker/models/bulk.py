"""Batch (bulk) operation models."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from geotasker.models.imagery import (
    DeliveryParams,
    FeasibilityResult,
    Order,
    ProductType,
    Provider,
    Resolution,
)

T = TypeVar("T")

MAX_BATCH_SIZE = 100


class BulkModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Location(BulkModel):
    """A single area to process; `location` is WKT, "lat,lng" or GeoJSON."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )
    id: str = Field(min_length=1)
    name: str | None = None
    location: str | dict[str, Any]
    metadata: dict[str, Any] | None = None

    @property
    def label(self) -> str:
        return self.name or self.id


class BulkRequestBase(BulkModel):
    locations: list[Location]
    product_type: ProductType
    resolution: Resolution
    start_date: str
    end_date: str
    max_cloud_coverage_percent: float | None = Field(default=None, ge=0, le=100)
    required_provider: Provider | None = None

    @field_validator("product_type", mode="before")
    @classmethod
    def parse_product_type(cls, v):
        return ProductType(v)

    @field_validator("resolution", mode="before")
    @classmethod
    def parse_resolution(cls, v):
        return Resolution.parse(v)


class BulkFeasibilityRequest(BulkRequestBase):
    pass


class BulkOrderRequest(BulkRequestBase):
    confirmation_token: str | None = None
    delivery_config: DeliveryParams | None = None


class BatchProgress(BulkModel):
    """
    Immutable progress value for a running batch.

    Each transition returns a new value, so snapshots handed to progress
    callbacks never change after the fact.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )
    total: int
    completed: int = 0
    pending: int
    successful: int = 0
    failed: int = 0
    current_location: str | None = None

    @classmethod
    def initial(cls, total: int) -> "BatchProgress":
        return cls(total=total, pending=total)

    def start(self, location_label: str) -> "BatchProgress":
        return self.model_copy(update={"current_location": location_label})

    def record_success(self) -> "BatchProgress":
        return self.model_copy(
            update={
                "completed": self.completed + 1,
                "pending": self.pending - 1,
                "successful": self.successful + 1,
            }
        )

    def record_failure(self) -> "BatchProgress":
        return self.model_copy(
            update={
                "completed": self.completed + 1,
                "pending": self.pending - 1,
                "failed": self.failed + 1,
            }
        )

    @property
    def is_finished(self) -> bool:
        return self.pending == 0


class BatchError(BulkModel):
    code: str
    message: str


class FeasibilityOutcome(BulkModel):
    feasible: bool
    feasibility_score: float
    weather_score: float
    opportunity_count: int
    details: FeasibilityResult | None = None


class BatchResult(BulkModel, Generic[T]):
    location_id: str
    location_name: str | None = None
    success: bool
    result: T | None = None
    error: BatchError | None = None


class BatchReport(BulkModel, Generic[T]):
    results: list[BatchResult[T]]
    progress: BatchProgress
    progress_log: list[BatchProgress] = []


FeasibilityBatchResult = BatchResult[FeasibilityOutcome]
OrderBatchResult = BatchResult[Order]
