"""Transformers-backed inference engine.

Runs a causal language model over a prompt in a single forward pass and
returns the next-token logits. Loading, attention and caching stay inside
transformers.
"""

import gc
from typing import List, Optional

import torch

from tokenprobe.infrastructure.tokenization import TokenizerAdapter
from tokenprobe.utils.error_manager import ModelError, ErrorCode
from tokenprobe.utils.exception_handlers import handle_decode_errors
from tokenprobe.utils.logging_utils import LoggingMixin
from tokenprobe.utils.model_utils import load_model, get_best_device


class TransformersEngine(LoggingMixin):
    """Inference engine over a HuggingFace causal LM and its tokenizer."""

    def __init__(self, model, tokenizer, device: str = "cpu",
                 n_ctx: Optional[int] = None, model_id: Optional[str] = None):
        """Wrap an already loaded model.

        Args:
            model: ``PreTrainedModel`` in eval mode
            tokenizer: Matching HuggingFace tokenizer
            device: Device the inputs are moved to
            n_ctx: Context window override; defaults to the model's own
            model_id: Name reported by health checks
        """
        assert model is not None, "Model cannot be None"
        assert callable(model), "Model must be callable"

        self.setup_logging("engine")

        self.model = model
        self.tokenizer = TokenizerAdapter(tokenizer)
        self.device = device
        self.model_id = model_id or getattr(
            getattr(model, "config", None), "_name_or_path", "unknown"
        )
        self._n_ctx = n_ctx or self._detect_context_window()
        self._n_vocab = self._detect_vocab_size()

        self.logger.info(
            f"Engine ready: model={self.model_id} device={device} "
            f"n_ctx={self._n_ctx} n_vocab={self._n_vocab}"
        )

    @classmethod
    def from_pretrained(cls, model_id: Optional[str] = None, device: Optional[str] = None,
                        n_ctx: Optional[int] = None, **kwargs) -> "TransformersEngine":
        """Load a model and tokenizer and wrap them.

        Raises:
            ModelError: If loading fails
        """
        if device is None or device == "auto":
            device = get_best_device()
        model, tokenizer = load_model(model_id=model_id, device=device, **kwargs)
        return cls(model, tokenizer, device=device, n_ctx=n_ctx,
                   model_id=model_id or getattr(model.config, "_name_or_path", None))

    def _detect_context_window(self) -> int:
        model_config = getattr(self.model, "config", None)
        for attr in ("max_position_embeddings", "n_positions", "n_ctx", "seq_length"):
            value = getattr(model_config, attr, None)
            if isinstance(value, int) and value > 0:
                return value

        max_length = self.tokenizer.model_max_length
        if max_length:
            return max_length

        raise ModelError(
            "Cannot determine the model's context window; set model.n_ctx",
            code=ErrorCode.MODEL_LOAD_FAILED,
        )

    def _detect_vocab_size(self) -> int:
        # The output layer can be padded beyond the tokenizer's vocabulary
        value = getattr(getattr(self.model, "config", None), "vocab_size", None)
        if isinstance(value, int) and value > 0:
            return value
        return self.tokenizer.vocab_size

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ModelError("Model has been released", code=ErrorCode.MODEL_NOT_AVAILABLE)

    @property
    def n_ctx(self) -> int:
        return self._n_ctx

    @property
    def n_vocab(self) -> int:
        return self._n_vocab

    @property
    def is_closed(self) -> bool:
        return self.model is None

    def tokenize(self, text: str, add_special_tokens: bool = True) -> List[int]:
        self._ensure_open()
        return self.tokenizer.encode(text, add_special_tokens=add_special_tokens)

    def token_to_piece(self, token_id: int) -> str:
        self._ensure_open()
        return self.tokenizer.token_to_piece(token_id)

    def decode_last_logits(self, token_ids: List[int]) -> torch.Tensor:
        """Evaluate the prompt and return the logits of its last position.

        Only one batch row is submitted; the model is asked for logits of the
        full sequence and the last row is kept.
        """
        self._ensure_open()
        return self._forward(token_ids)

    @handle_decode_errors(error_message="Model forward pass failed")
    def _forward(self, token_ids: List[int]) -> torch.Tensor:
        if not token_ids:
            raise ValueError("Cannot evaluate an empty prompt")

        input_device = getattr(self.model, "device", None) or self.device
        input_ids = torch.tensor([token_ids], dtype=torch.long, device=input_device)
        attention_mask = torch.ones_like(input_ids)

        with torch.no_grad():
            outputs = self.model(
                input_ids=input_ids, attention_mask=attention_mask, use_cache=False
            )

        logits = outputs.logits[0, -1]
        self.log(f"Decoded {len(token_ids)} tokens, logits shape {tuple(logits.shape)}", "debug")
        return logits

    def close(self) -> None:
        """Drop the model and tokenizer and free accelerator memory."""
        if self.is_closed:
            return

        self.logger.info(f"Releasing model {self.model_id}")
        self.model = None
        self.tokenizer = None
        gc.collect()
        if torch.cuda.is_available():
            torch.cuda.empty_cache()
