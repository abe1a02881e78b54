"""Domain entities for probability lookups."""

from .probability import TokenProbability, ProbeResult

__all__ = ["TokenProbability", "ProbeResult"]
