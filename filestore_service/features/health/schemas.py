"""Health check response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service health including object-store reachability."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall status")
    storage: Literal["ready", "unavailable"] = Field(
        ..., description="Whether the object store answered a HEAD on the bucket"
    )
    bucket: str = Field(..., description="Configured bucket")
