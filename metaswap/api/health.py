from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..core.aggregator import MetaAggregator, get_aggregator

router = APIRouter()


@router.get("/healthz")
async def health_check(aggregator: MetaAggregator = Depends(get_aggregator)) -> Dict[str, Any]:
    """Report which providers are configured, public or missing a required key"""

    provider_status = aggregator.registry.describe()

    available_providers = sum(
        1 for status in provider_status.values()
        if status["mode"] != "unavailable"
    )

    return {
        "status": "healthy" if available_providers > 0 else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }
