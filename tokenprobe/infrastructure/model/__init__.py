"""Model infrastructure."""

from .engine import TransformersEngine

__all__ = ["TransformersEngine"]
