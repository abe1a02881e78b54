"""Probability lookup algorithms."""

from .softmax import softmax
from .target_parser import split_targets, parse_target_tokens

__all__ = [
    "softmax",
    "split_targets",
    "parse_target_tokens",
]
