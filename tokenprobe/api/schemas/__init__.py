"""Pydantic schemas for the tokenprobe API."""

from tokenprobe.api.schemas.props import (
    PropsRequest,
    TokenProbabilityInfo,
    PropsResponse,
    ShutdownResponse,
)
from tokenprobe.api.schemas.health import HealthResponse

__all__ = [
    "PropsRequest",
    "TokenProbabilityInfo",
    "PropsResponse",
    "ShutdownResponse",
    "HealthResponse",
]
