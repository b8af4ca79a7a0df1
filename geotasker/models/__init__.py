from .bulk import (
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
from .imagery import (
    FeasibilityRequest,
    FeasibilityResult,
    Order,
    OrderStatus,
    ProductType,
    ProviderStatus,
    Resolution,
)

__all__ = [
    "MAX_BATCH_SIZE",
    "BatchError",
    "BatchProgress",
    "BatchReport",
    "BatchResult",
    "BulkFeasibilityRequest",
    "BulkOrderRequest",
    "FeasibilityOutcome",
    "Location",
    "FeasibilityRequest",
    "FeasibilityResult",
    "Order",
    "OrderStatus",
    "ProductType",
    "ProviderStatus",
    "Resolution",
]
