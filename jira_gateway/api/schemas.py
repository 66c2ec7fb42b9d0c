"""Pydantic schemas for API responses."""

from typing import Optional

from pydantic import BaseModel


class ServiceInfoResponse(BaseModel):
    """Service root response."""

    name: str
    version: str
    docs: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    integration_configured: bool
