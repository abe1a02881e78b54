"""Tokenizer adapter implementation for tokenprobe.

This module provides an adapter for HuggingFace tokenizers exposing exactly
the operations the probability lookup needs.
"""

from typing import List, Optional

from tokenprobe.utils.logging_utils import LoggingMixin
from tokenprobe.utils.exception_handlers import handle_tokenization_errors


class TokenizerAdapter(LoggingMixin):
    """Adapter for HuggingFace tokenizers."""

    def __init__(self, tokenizer):
        """Initialize the tokenizer adapter.

        Args:
            tokenizer: HuggingFace tokenizer instance
        """
        assert tokenizer is not None, "Tokenizer cannot be None"
        assert hasattr(tokenizer, "encode"), "Tokenizer must have encode method"
        assert hasattr(tokenizer, "decode"), "Tokenizer must have decode method"

        self.tokenizer = tokenizer
        self.setup_logging("tokenizer_adapter")

    @handle_tokenization_errors(error_message="Failed to tokenize text")
    def encode(self, text: str, add_special_tokens: bool = True) -> List[int]:
        """Tokenize text into ids.

        Args:
            text: Text to tokenize
            add_special_tokens: Whether to add BOS/special markers

        Returns:
            List of token ids
        """
        if not text:
            return []

        token_ids = self.tokenizer.encode(
            text, add_special_tokens=add_special_tokens
        )
        token_ids = [int(t) for t in token_ids]

        self.log(f"Tokenized {text[:50]!r} to {len(token_ids)} tokens", "debug")
        return token_ids

    @handle_tokenization_errors(error_message="Failed to decode token")
    def token_to_piece(self, token_id: int) -> str:
        """Decode a single token ID to its surface text."""
        return self.tokenizer.decode(
            [token_id],
            skip_special_tokens=False,
            clean_up_tokenization_spaces=False,
        )

    @property
    def model_max_length(self) -> Optional[int]:
        """Tokenizer's declared maximum length, if it is a real bound."""
        max_length = getattr(self.tokenizer, "model_max_length", None)
        # transformers uses a huge sentinel when the length is unknown
        if isinstance(max_length, int) and 0 < max_length < 1_000_000:
            return max_length
        return None

    @property
    def vocab_size(self) -> int:
        """Get vocabulary size."""
        return len(self.tokenizer)
