"""
Health check controller following Single Responsibility Principle.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from api.dependencies import ServiceContainer, get_container
from api.models.responses import HealthCheckResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="API, storage and tax authority health",
)
async def health_check(container: ServiceContainer = Depends(get_container)):
    """Report degraded when the authority or the store does not answer."""
    services = {"api": "healthy"}

    try:
        services["storage"] = "healthy" if await container.store.ping() else "unavailable"
    except Exception as e:
        logger.warning(f"Storage health check failed: {e}")
        services["storage"] = "unavailable"

    contingency = await container.contingency_manager.should_activate_contingency()
    services["authority"] = "unavailable" if contingency else "healthy"

    overall = "healthy" if all(v == "healthy" for v in services.values()) else "degraded"
    return HealthCheckResponse(status=overall, services=services)
