"""
Blocking wrapper around the vendor's asynchronous feasibility workflow.

1. Submit the feasibility request
2. Poll its status until a completion signal shows up or attempts run out
3. Return whatever was last observed
"""

import asyncio
import logging

from geotasker.clients.imagery_api import ImageryApiClient, Sleep
from geotasker.models.imagery import (
    NOT_COMPUTED_SCORE,
    FeasibilityRequest,
    FeasibilityResult,
    ProviderScore,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_INTERVAL = 3.0


def is_complete(result: FeasibilityResult) -> bool:
    """
    Whether a feasibility result is worth returning to the caller.

    Any one signal is enough: every provider finished, some provider already
    reported opportunities, or the overall score has been computed. A result
    with no providers at all is still waiting.
    """
    providers = result.providers
    if not providers:
        return False

    all_finished = all(p.is_finished for p in providers)
    has_opportunities = any(p.opportunities for p in providers)
    has_score = result.feasibility_score != NOT_COMPUTED_SCORE
    return all_finished or has_opportunities or has_score


def provider_is_viable(provider: ProviderScore) -> bool:
    return provider.score > 0 or bool(provider.opportunities)


def is_feasible(result: FeasibilityResult) -> bool:
    """Feasible if the overall score is positive or any provider can capture."""
    return result.feasibility_score > 0 or any(
        provider_is_viable(p) for p in result.providers
    )


class FeasibilityPoller:
    def __init__(
        self,
        client: ImageryApiClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.max_attempts = max_attempts
        self.interval = interval
        self.sleep = sleep

    async def check(self, request: FeasibilityRequest) -> FeasibilityResult:
        """
        Submit a feasibility check and wait for a usable result.

        Args:
            request: Feasibility request for a single area

        Returns:
            The first complete result, or the last observed one if polling
            attempts ran out. Running out is not an error.

        Raises:
            ImageryApiError: If submitting or polling fails after retries
        """
        result = await self.client.check_feasibility(request)
        feasibility_id = result.id
        logger.info(f"Submitted feasibility check {feasibility_id}")

        if is_complete(result):
            return result.model_copy(update={"request": request})

        for attempt in range(1, self.max_attempts + 1):
            await self.sleep(self.interval)
            result = await self.client.get_feasibility_status(feasibility_id)
            if is_complete(result):
                logger.info(
                    f"Feasibility check {feasibility_id} complete after {attempt} poll(s)"
                )
                return result.model_copy(update={"request": request})
            logger.debug(
                f"Feasibility poll {attempt}/{self.max_attempts} for {feasibility_id} still pending"
            )

        logger.warning(
            f"Feasibility check {feasibility_id} still pending after "
            f"{self.max_attempts} polls, returning partial result"
        )
        return result.model_copy(update={"request": request})
