"""Inference engine interface.

This module defines what the probability service needs from the wrapped
language model: tokenization, one forward pass and resource release.
"""

from typing import Protocol, List
import torch
from abc import abstractmethod


class InferenceEngine(Protocol):
    """Interface for the external inference engine."""

    @abstractmethod
    def tokenize(self, text: str, add_special_tokens: bool = True) -> List[int]:
        """Tokenize text into vocabulary ids.

        Args:
            text: Text to tokenize
            add_special_tokens: Prepend the beginning-of-sequence marker (and
                any other special tokens the model uses)

        Returns:
            Token ids
        """
        ...

    @abstractmethod
    def token_to_piece(self, token_id: int) -> str:
        """Surface text of a single token."""
        ...

    @abstractmethod
    def decode_last_logits(self, token_ids: List[int]) -> torch.Tensor:
        """Evaluate the prompt in one pass.

        Args:
            token_ids: Prompt tokens, at most ``n_ctx`` of them

        Returns:
            1-D logits of the last prompt position, length ``n_vocab``

        Raises:
            DecodeError: If the forward pass fails
        """
        ...

    @property
    @abstractmethod
    def n_ctx(self) -> int:
        """Maximum number of tokens evaluated in one pass."""
        ...

    @property
    @abstractmethod
    def n_vocab(self) -> int:
        """Vocabulary size."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Whether ``close()`` has released the model."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the model and tokenizer handles."""
        ...
