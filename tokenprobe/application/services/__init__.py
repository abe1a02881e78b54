"""Application services."""

from .probability_service import ProbabilityService

__all__ = ["ProbabilityService"]
