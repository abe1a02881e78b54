"""Tokenization infrastructure."""

from .tokenizer_adapter import TokenizerAdapter

__all__ = ["TokenizerAdapter"]
