"""Typed argument models for each tool, validated before any vendor call."""

from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
)
from pydantic.alias_generators import to_camel

from geotasker.core.errors import InvalidRequestError
from geotasker.models.imagery import OrderStatus, ProductType, Provider, Resolution
from geotasker.utils import to_iso_datetime, to_wkt


def _location_to_wkt(v: Any) -> str:
    try:
        return to_wkt(v)
    except InvalidRequestError as e:
        raise ValueError(e.message) from e


def _iso_datetime(v: str) -> str:
    try:
        return to_iso_datetime(v)
    except InvalidRequestError as e:
        raise ValueError(e.message) from e


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


# A location given as WKT, "lat,lng" or GeoJSON, normalized to a WKT polygon.
AreaOfInterest = Annotated[str | dict[str, Any], AfterValidator(_location_to_wkt)]
IsoDateTime = Annotated[str, AfterValidator(_iso_datetime)]
Identifier = Annotated[str, AfterValidator(_not_blank)]
ProductTypeInput = Annotated[ProductType, BeforeValidator(lambda v: ProductType(v))]
ResolutionInput = Annotated[Resolution, BeforeValidator(lambda v: Resolution.parse(v))]


class ToolArgs(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class SearchArchiveArgs(ToolArgs):
    location: AreaOfInterest
    from_date: IsoDateTime | None = None
    to_date: IsoDateTime | None = None
    max_cloud_coverage_percent: float | None = Field(default=None, ge=0, le=100)
    max_off_nadir_angle: float | None = Field(default=None, ge=0, le=90)
    resolutions: list[ResolutionInput] | None = None
    product_types: list[ProductTypeInput] | None = None
    providers: list[str] | None = None
    open_data: bool | None = None
    page_size: int | None = Field(default=None, ge=1, le=100)


class ArchivesPageArgs(ToolArgs):
    page_hash: Identifier


class GetArchiveArgs(ToolArgs):
    archive_id: Identifier


class PricingArgs(ToolArgs):
    location: AreaOfInterest | None = None


class FeasibilityArgs(ToolArgs):
    location: AreaOfInterest
    product_type: ProductTypeInput
    resolution: ResolutionInput
    start_date: str
    end_date: str
    max_cloud_coverage_percent: float | None = Field(default=None, ge=0, le=100)
    required_provider: Provider | None = None


class PlaceArchiveOrderArgs(ToolArgs):
    archive_id: Identifier
    location: AreaOfInterest | None = None
    delivery_bucket: str | None = None
    delivery_path: str | None = None


class PlaceTaskingOrderArgs(ToolArgs):
    location: AreaOfInterest
    date_from: IsoDateTime
    date_to: IsoDateTime
    product_type: ProductTypeInput
    resolution: ResolutionInput
    cloud_cover_max: float | None = Field(default=None, ge=0, le=100)
    off_nadir_max: float | None = Field(default=None, ge=0, le=90)
    required_provider: Provider | None = None
    provider_window_id: str | None = None
    delivery_bucket: str | None = None
    delivery_path: str | None = None


class OrderStatusArgs(ToolArgs):
    order_id: Identifier


class PollOrderStatusArgs(ToolArgs):
    # bounds are checked by the poller so the messages match its contract
    order_id: str | None = None
    max_attempts: int = 10
    interval_seconds: float = 30


class ListOrdersArgs(ToolArgs):
    limit: int | None = Field(default=None, ge=1, le=100)
    offset: int | None = Field(default=None, ge=0)
    type: Literal["ARCHIVE", "TASKING"] | None = None
    status: OrderStatus | None = None


class CreateMonitorArgs(ToolArgs):
    location: AreaOfInterest
    webhook_url: HttpUrl
    gsd_min: float | None = Field(default=None, gt=0)
    gsd_max: float | None = Field(default=None, gt=0)
    product_type: ProductTypeInput | None = None


class MonitorIdArgs(ToolArgs):
    monitor_id: Identifier


class NoArgs(ToolArgs):
    pass
