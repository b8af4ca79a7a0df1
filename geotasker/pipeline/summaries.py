"""Pure aggregations over bulk operation results."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from geotasker.models.bulk import BatchResult, FeasibilityOutcome
from geotasker.models.imagery import Order


class FeasibilitySummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    total: int
    feasible: int
    infeasible: int
    errors: int
    average_feasibility_score: float
    average_weather_score: float
    total_opportunities: int


class OrderSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    total: int
    successful: int
    failed: int
    order_ids: list[str]


def _average(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def summarize_feasibility(
    results: list[BatchResult[FeasibilityOutcome]],
) -> FeasibilitySummary:
    """
    Totals and averages for a feasibility batch.

    Errored items count towards `errors` only; averages and opportunity totals
    are computed over the items that returned a result.
    """
    outcomes = [r.result for r in results if r.success and r.result is not None]
    feasible = sum(1 for o in outcomes if o.feasible)

    return FeasibilitySummary(
        total=len(results),
        feasible=feasible,
        infeasible=len(outcomes) - feasible,
        errors=len(results) - len(outcomes),
        average_feasibility_score=_average([o.feasibility_score for o in outcomes]),
        average_weather_score=_average([o.weather_score for o in outcomes]),
        total_opportunities=sum(o.opportunity_count for o in outcomes),
    )


def summarize_orders(results: list[BatchResult[Order]]) -> OrderSummary:
    successful = [r for r in results if r.success and r.result is not None]
    return OrderSummary(
        total=len(results),
        successful=len(successful),
        failed=len(results) - len(successful),
        order_ids=[r.result.id for r in successful],
    )
