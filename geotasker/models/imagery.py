"""Vendor API request and response models."""

import math
from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NOT_COMPUTED_SCORE = -1.0
DEFAULT_DELIVERY_BUCKET = "s3://default-bucket"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, vendor extras preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ProductType(StrEnum):
    DAY = "DAY"
    NIGHT = "NIGHT"
    VIDEO = "VIDEO"
    SAR = "SAR"
    HYPERSPECTRAL = "HYPERSPECTRAL"
    MULTISPECTRAL = "MULTISPECTRAL"
    STEREO = "STEREO"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None

    @property
    def is_optical(self) -> bool:
        return self is not ProductType.SAR


class Resolution(StrEnum):
    """Resolution tiers in ordinal order; comparisons follow declaration order."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY HIGH"
    SUPER_HIGH = "SUPER HIGH"
    ULTRA_HIGH = "ULTRA HIGH"
    CM_30 = "CM 30"
    CM_50 = "CM 50"

    @property
    def rank(self) -> int:
        return list(Resolution).index(self)

    def __lt__(self, other):
        if not isinstance(other, Resolution):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Resolution):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Resolution):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Resolution):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = " ".join(value.replace("_", " ").upper().split())
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def from_gsd(cls, metres: float) -> "Resolution":
        """Map a ground sample distance in metres to the closest tier."""
        if not math.isfinite(metres) or metres <= 0:
            raise ValueError(f"GSD must be a positive number of metres, got {metres}")
        if metres <= 0.3:
            return cls.CM_30
        if metres <= 0.5:
            return cls.CM_50
        if metres <= 0.75:
            return cls.ULTRA_HIGH
        if metres <= 1:
            return cls.SUPER_HIGH
        if metres <= 1.5:
            return cls.VERY_HIGH
        if metres <= 3:
            return cls.HIGH
        if metres <= 5:
            return cls.MEDIUM
        return cls.LOW

    @classmethod
    def parse(cls, value: "str | float | int | Resolution") -> "Resolution":
        """
        Parse a tier name ("VERY_HIGH", "very high") or a numeric GSD.

        Raises:
            ValueError: If the value is neither a known tier nor a number
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls.from_gsd(float(value))
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
            try:
                return cls.from_gsd(float(value))
            except ValueError:
                pass
        valid = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown resolution {value!r}. Use one of: {valid}, or a GSD in metres"
        )


class ProviderStatus(StrEnum):
    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class OrderStatus(StrEnum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_ORDER_STATUSES


TERMINAL_ORDER_STATUSES = frozenset(
    {
        OrderStatus.COMPLETED,
        OrderStatus.DELIVERED,
        OrderStatus.FAILED,
        OrderStatus.CANCELLED,
    }
)

Provider = Literal["PLANET", "UMBRA"]
DeliveryDriver = Literal["S3", "GS", "AZURE"]


# ==================== Archive ====================


class SearchArchiveRequest(WireModel):
    aoi: str
    from_date: str | None = None
    to_date: str | None = None
    max_cloud_coverage_percent: float | None = None
    max_off_nadir_angle: float | None = None
    resolutions: list[Resolution] | None = None
    product_types: list[ProductType] | None = None
    providers: list[str] | None = None
    open_data: bool | None = None
    page_size: int | None = None


class ArchiveResult(WireModel):
    archive_id: str
    provider: str | None = None
    constellation: str | None = None
    product_type: str | None = None
    resolution: str | None = None
    capture_timestamp: str | None = None
    cloud_coverage_percent: float | None = None
    off_nadir_angle: float | None = None
    footprint: str | None = None
    min_square_kms: float | None = None
    max_square_kms: float | None = None
    price_for_one_square_km: float | None = None
    delivery_time_hours: float | None = None
    thumbnail_urls: dict[str, str] | None = None
    gsd: float | None = None


class SearchArchiveResponse(WireModel):
    archives: list[ArchiveResult] = []
    total: int | None = None
    next_page: str | None = None


# ==================== Pricing ====================


class PricingRequest(WireModel):
    aoi: str | None = None


class PricingResponse(WireModel):
    product_types: dict[str, Any] | list[Any] | None = None


# ==================== Feasibility ====================


class FeasibilityRequest(WireModel):
    aoi: str
    product_type: ProductType
    resolution: Resolution
    start_date: str
    end_date: str
    max_cloud_coverage_percent: float | None = Field(default=None, ge=0, le=100)
    required_provider: Provider | None = None


class Opportunity(WireModel):
    """A single candidate capture pass; the vendor shape varies per provider."""

    window_start: str | None = None
    window_end: str | None = None
    provider_window_id: str | None = None


class ProviderScore(WireModel):
    provider: str
    status: ProviderStatus = ProviderStatus.PENDING
    score: float = 0.0
    opportunities: list[Opportunity] = []

    @field_validator("opportunities", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def is_finished(self) -> bool:
        return self.status in (ProviderStatus.COMPLETE, ProviderStatus.ERROR)


class ProviderScoreSummary(WireModel):
    score: float = 0.0
    provider_scores: list[ProviderScore] = []


class WeatherScore(WireModel):
    weather_score: float = 0.0
    weather_details: Any = None


class OverallScore(WireModel):
    feasibility: float = NOT_COMPUTED_SCORE
    weather_score: WeatherScore = Field(default_factory=WeatherScore)
    provider_score: ProviderScoreSummary = Field(default_factory=ProviderScoreSummary)


class FeasibilityResult(WireModel):
    id: str
    valid_until: str | None = None
    overall_score: OverallScore = Field(default_factory=OverallScore)
    request: FeasibilityRequest | None = Field(default=None, exclude=True)

    @property
    def feasibility_score(self) -> float:
        return self.overall_score.feasibility

    @property
    def weather_score(self) -> float:
        return self.overall_score.weather_score.weather_score

    @property
    def providers(self) -> list[ProviderScore]:
        return self.overall_score.provider_score.provider_scores

    @property
    def opportunity_count(self) -> int:
        return sum(len(p.opportunities) for p in self.providers)


# ==================== Orders ====================


class DeliveryParams(WireModel):
    bucket: str
    path: str | None = None
    credentials: dict[str, str] | None = None


class PlaceArchiveOrderRequest(WireModel):
    archive_id: str
    aoi: str | None = None
    delivery_driver: DeliveryDriver | None = None
    delivery_params: DeliveryParams | None = None
    metadata: dict[str, Any] | None = None
    webhook_url: str | None = None


class PlaceTaskingOrderRequest(WireModel):
    aoi: str
    window_start: str
    window_end: str
    product_type: ProductType
    resolution: Resolution
    max_cloud_coverage_percent: float | None = None
    max_off_nadir_angle: float | None = None
    priority_item: str | None = None
    delivery_driver: DeliveryDriver = "S3"
    delivery_params: DeliveryParams = Field(
        default_factory=lambda: DeliveryParams(bucket=DEFAULT_DELIVERY_BUCKET)
    )
    metadata: dict[str, Any] | None = None
    webhook_url: str | None = None
    required_provider: Provider | None = None
    provider_window_id: str | None = None


class Order(WireModel):
    id: str = Field(validation_alias=AliasChoices("id", "orderId"))
    order_type: str | None = Field(
        default=None, validation_alias=AliasChoices("orderType", "type")
    )
    status: OrderStatus = OrderStatus.PENDING
    archive_id: str | None = None
    aoi: str | None = None
    price: float | None = None
    currency: str | None = None
    progress: float | None = None
    deliverables: list[str] = Field(
        default=[], validation_alias=AliasChoices("deliverables", "downloadUrls")
    )
    created_at: str | None = None
    updated_at: str | None = None
    estimated_delivery: str | None = None
    error_message: str | None = None

    @field_validator("deliverables", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class ListOrdersRequest(WireModel):
    type: Literal["ARCHIVE", "TASKING"] | None = None
    status: OrderStatus | None = None
    limit: int | None = None
    offset: int | None = None


class ListOrdersResponse(WireModel):
    orders: list[Order] = []
    total: int | None = None
    has_more: bool | None = None


# ==================== Monitors ====================


class CreateMonitorRequest(WireModel):
    aoi: str
    webhook_url: str
    gsd_min: float | None = None
    gsd_max: float | None = None
    product_type: ProductType | None = None


class Monitor(WireModel):
    id: str
    status: str | None = None
    aoi: str | None = None
    gsd_min: float | None = None
    gsd_max: float | None = None
    product_type: str | None = None
    webhook_url: str | None = None
    created_at: str | None = None
    last_triggered: str | None = None
    trigger_count: int | None = None


class ListMonitorsResponse(WireModel):
    notifications: list[Monitor] = []
    total: int | None = None
