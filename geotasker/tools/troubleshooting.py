"""Human guidance attached to tool results: error hints, window checks, alternatives."""

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from geotasker.core.errors import ErrorCode, GeotaskerError, InvalidRequestError
from geotasker.models.imagery import (
    FeasibilityResult,
    OrderStatus,
    ProductType,
    ProviderStatus,
    Resolution,
)
from geotasker.utils import parse_datetime

MAX_START_DATE_DAYS = 14
SHORT_WINDOW_DAYS = 7
POOR_WEATHER_SCORE = 0.3

Hints = tuple[list[str], list[str]]

_DEFAULT_HINTS: Hints = (
    ["Server error"],
    ["Try again later", "Contact support if issue persists"],
)

_REQUEST_HINTS: dict[int, Hints] = {
    400: (
        ["Invalid request parameters", "Malformed WKT coordinates", "Invalid date format"],
        [
            "Verify all required fields are provided",
            "Check WKT POLYGON format",
            "Use ISO 8601 date format",
        ],
    ),
    401: (
        ["Invalid API key", "Expired API key"],
        ["Verify your API key is correct", "Generate a new API key if needed"],
    ),
    403: (
        ["Insufficient permissions", "Account not authorized for this operation"],
        ["Check your account permissions", "Contact support to upgrade access"],
    ),
    404: (
        ["Resource not found"],
        ["Verify the request parameters", "Search archive for available imagery"],
    ),
    429: (
        ["Rate limit exceeded"],
        ["Wait before making more requests", "Consider upgrading your plan for higher limits"],
    ),
}

_ORDER_HINTS: dict[int, Hints] = {
    **_REQUEST_HINTS,
    402: (
        ["Payment required", "Account balance is too low for this order"],
        ["Check your billing status", "Add funds to your account"],
    ),
    403: (
        ["Insufficient permissions", "Account not authorized for ordering"],
        ["Check your account permissions", "Contact support to enable ordering"],
    ),
    404: (
        ["Archive ID not found", "Resource no longer available"],
        ["Verify the archive ID is correct", "Search archive for current availability"],
    ),
    409: (
        ["Duplicate order", "Order conflicts with an existing order"],
        ["Check list_orders for an existing order", "Wait before retrying the same order"],
    ),
    422: (
        ["Order validation failed", "Infeasible request"],
        ["Use check_order_feasibility before ordering", "Adjust request parameters"],
    ),
}

_CODE_STATUS = {ErrorCode.INSUFFICIENT_FUNDS: 402}

_STATUS_DESCRIPTIONS = {
    OrderStatus.PENDING: "Order is queued and waiting to be processed",
    OrderStatus.PROCESSING: "Order is being processed by the satellite provider",
    OrderStatus.COMPLETED: "Order is complete and imagery is available for download",
    OrderStatus.DELIVERED: "Imagery has been delivered to your storage",
    OrderStatus.FAILED: "Order failed, check errorMessage for details",
    OrderStatus.CANCELLED: "Order was cancelled",
}


def _hints(table: dict[int, Hints], error: GeotaskerError) -> dict[str, list[str]]:
    status = _CODE_STATUS.get(error.code, error.status_code)
    causes, suggestions = table.get(status, _DEFAULT_HINTS)
    return {"possibleCauses": list(causes), "suggestions": list(suggestions)}


def request_troubleshooting(error: GeotaskerError) -> dict[str, list[str]]:
    """Possible causes and suggestions for a failed search, pricing or feasibility call."""
    return _hints(_REQUEST_HINTS, error)


def order_troubleshooting(error: GeotaskerError) -> dict[str, list[str]]:
    """Possible causes and suggestions for a failed order placement."""
    return _hints(_ORDER_HINTS, error)


def status_description(status: OrderStatus) -> str:
    return _STATUS_DESCRIPTIONS.get(status, "Unknown status")


def check_start_date(start_date: str, now: datetime | None = None) -> datetime:
    """
    Tasking can only be scheduled a limited number of days ahead.

    Returns:
        The parsed start date

    Raises:
        InvalidRequestError: DATE_CONSTRAINT_ERROR if the start is too far out
    """
    now = now or datetime.now(UTC)
    start = parse_datetime(start_date)
    if start > now + timedelta(days=MAX_START_DATE_DAYS):
        tomorrow = (now + timedelta(days=1)).date().isoformat()
        raise InvalidRequestError(
            f'Start date must be within {MAX_START_DATE_DAYS} days of today. '
            f'"{start_date}" is too far in the future.',
            details={
                "suggestion": (
                    f'Use a start date like "{tomorrow}" (tomorrow) and extend the '
                    "end date for a longer capture window."
                ),
                "tip": (
                    f"Tasking can only be scheduled up to {MAX_START_DATE_DAYS} days "
                    "in advance. Use a longer end date window instead."
                ),
            },
            code=ErrorCode.DATE_CONSTRAINT_ERROR,
        )
    return start


@dataclass(frozen=True)
class WindowAnalysis:
    days: int
    short: bool
    suggestion: str | None = None


def analyze_window(start: datetime, end: datetime) -> WindowAnalysis:
    days = math.ceil((end - start).total_seconds() / 86400)
    if days < SHORT_WINDOW_DAYS:
        return WindowAnalysis(
            days=days,
            short=True,
            suggestion=(
                f"Your capture window is only {days} day(s). Consider extending "
                "to 30-60 days for more capture opportunities."
            ),
        )
    return WindowAnalysis(days=days, short=False)


def explain_infeasibility(
    result: FeasibilityResult, product_type: ProductType, window: WindowAnalysis
) -> tuple[str, list[str]]:
    """
    Best guess at why a feasibility check came back negative.

    Returns:
        (reason, suggestions)
    """
    reason = "Order is not feasible"
    suggestions: list[str] = []
    weather = result.weather_score

    if product_type.is_optical and 0 <= weather < POOR_WEATHER_SCORE:
        reason = "Poor weather conditions expected for optical imagery"
        suggestions += [
            "Recommended: use SAR imagery, it is unaffected by cloud cover",
            "SAR at HIGH resolution from UMBRA usually has many capture opportunities",
            "If optical is required, try a date range with a better weather forecast",
        ]

    if window.short:
        suggestions.append(
            f"Extend capture window from {window.days} days to 30-60 days for more opportunities"
        )

    providers = result.providers
    if not providers:
        reason = "No providers available for this configuration"
        suggestions += [
            "Try SAR at HIGH resolution, reliably available from UMBRA",
            "Check get_pricing_estimate to see all available product/resolution combinations",
        ]
        return reason, suggestions

    failed = [p.provider for p in providers if p.status == ProviderStatus.ERROR]
    if failed:
        reason = f"Provider(s) returned errors: {', '.join(failed)}"
        if product_type is ProductType.SAR and "UMBRA" not in failed:
            suggestions.append('Try specifying requiredProvider: "UMBRA" for SAR imagery')
        elif product_type.is_optical:
            suggestions.append("Recommended: switch to SAR for more reliable availability")
        suggestions.append("Extend the date window to 30-60 days for more capture opportunities")

    return reason, suggestions


def needs_alternative(result: FeasibilityResult, product_type: ProductType) -> bool:
    providers = result.providers
    return (
        product_type.is_optical
        or not providers
        or all(p.status == ProviderStatus.ERROR for p in providers)
    )


def recommended_alternative(today: date | None = None) -> dict[str, Any]:
    today = today or datetime.now(UTC).date()
    return {
        "description": "High-reliability configuration",
        "productType": ProductType.SAR.value,
        "resolution": Resolution.HIGH.value,
        "provider": "UMBRA",
        "startDate": (today + timedelta(days=1)).isoformat(),
        "endDate": (today + timedelta(days=60)).isoformat(),
    }
