"""Health check API endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from filestore_service.features.health.schemas import HealthResponse
from filestore_service.infra.storage.dependencies import get_storage_gateway
from filestore_service.infra.storage.gateway import S3StorageGateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Reports whether the object store is reachable. Answers 503 when it is not.",
    responses={503: {"model": HealthResponse}},
)
async def health_check(
    response: Response,
    storage: Annotated[S3StorageGateway, Depends(get_storage_gateway)],
) -> HealthResponse:
    ready = storage.is_ready and await storage.health_check()
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if ready else "unhealthy",
        storage="ready" if ready else "unavailable",
        bucket=storage.settings.bucket,
    )
