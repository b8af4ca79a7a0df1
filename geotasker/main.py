import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI

from geotasker.api.deps import get_registry
from geotasker.api.main import api_router
from geotasker.core.config import config
from geotasker.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    registry = get_registry()
    if not config.IMAGERY_API_KEY:
        logger.warning(
            "IMAGERY_API_KEY is not set; tool calls will fail with CONFIGURATION_ERROR"
        )
    logger.info(f"Serving {len(registry)} tools")
    yield


app = FastAPI(
    title="geotasker",
    summary="Satellite imagery tasking tools API",
    description="""
    Exposes satellite imagery operations (archive search, pricing, feasibility checks, tasking and archive orders,
    order status polling, area monitors and bulk feasibility/ordering) as named tools an agent can call over HTTP.
    """,
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)

app.include_router(api_router)


@app.get("/ping")
def health_check():
    """Health check endpoint."""
    return {"status": "up", "tools": len(get_registry())}
