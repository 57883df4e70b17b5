"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = Field(default="ok", description="Service status")
    store: str = Field(..., description="connected or disconnected")
    connections: int = Field(..., description="Active WebSocket connections")
