import copy
import os
import sys
import pytest
import torch
from types import SimpleNamespace
from unittest.mock import MagicMock

# Add project root to path to ensure imports work correctly
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tokenprobe.utils import config
from tokenprobe.utils.error_manager import ModelError, ErrorCode


class FakeEngine:
    """Character-level stand-in for the transformers engine.

    Id 0 is the beginning-of-sequence marker, printable ASCII maps to
    ``ord(c) - 31`` (1..95).
    """

    BOS = 0

    def __init__(self, n_ctx=16, logits=None):
        self._n_ctx = n_ctx
        self._n_vocab = 96
        self.logits = logits if logits is not None else torch.arange(96, dtype=torch.float32) / 10
        self.decode_error = None
        self.decoded = []
        self.tokenize_calls = []
        self.closed = False
        self.model_id = "fake-char-model"
        self.device = "cpu"

    def _ensure_open(self):
        if self.closed:
            raise ModelError("Model has been released", code=ErrorCode.MODEL_NOT_AVAILABLE)

    def tokenize(self, text, add_special_tokens=True):
        self._ensure_open()
        self.tokenize_calls.append((text, add_special_tokens))
        ids = [ord(c) - 31 for c in text]
        return [self.BOS] + ids if add_special_tokens else ids

    def token_to_piece(self, token_id):
        self._ensure_open()
        return "<s>" if token_id == self.BOS else chr(token_id + 31)

    def decode_last_logits(self, token_ids):
        self._ensure_open()
        self.decoded.append(list(token_ids))
        if self.decode_error is not None:
            raise self.decode_error
        return self.logits

    @property
    def n_ctx(self):
        return self._n_ctx

    @property
    def n_vocab(self):
        return self._n_vocab

    @property
    def is_closed(self):
        return self.closed

    def close(self):
        self.closed = True


class TinyCausalLM(torch.nn.Module):
    """Model whose logits at position i are ``input_ids[i] * weight``."""

    def __init__(self, vocab_size=10, max_position_embeddings=8):
        super().__init__()
        self.config = SimpleNamespace(
            vocab_size=vocab_size,
            max_position_embeddings=max_position_embeddings,
            _name_or_path="tiny-lm",
        )
        self.weight = torch.nn.Parameter(torch.linspace(0.0, 1.0, vocab_size), requires_grad=False)
        self.calls = []

    def forward(self, input_ids=None, attention_mask=None, use_cache=False):
        self.calls.append(input_ids.clone())
        logits = input_ids.unsqueeze(-1).float() * self.weight
        return SimpleNamespace(logits=logits)


@pytest.fixture
def fake_engine():
    """Return a fresh character-level engine."""
    return FakeEngine()


@pytest.fixture
def tiny_model():
    """Return a tiny causal LM."""
    return TinyCausalLM()


@pytest.fixture
def mock_tokenizer():
    """Create a mock HuggingFace tokenizer over a 10-token vocabulary."""
    tokenizer = MagicMock()
    tokenizer.encode.side_effect = lambda text, add_special_tokens=True: (
        ([1] if add_special_tokens else []) + [2 + (ord(c) % 8) for c in text]
    )
    tokenizer.decode.side_effect = lambda ids, **kwargs: "".join(f"<{i}>" for i in ids)
    tokenizer.__len__.return_value = 10
    tokenizer.model_max_length = 1000000000000000019884624838656
    return tokenizer


@pytest.fixture
def restore_config():
    """Restore the global configuration after a test mutates it."""
    saved = copy.deepcopy(config.to_dict())
    yield config
    config.update(saved)


@pytest.fixture
def engine_factory():
    """Return the fake engine class for tests needing custom windows or logits."""
    return FakeEngine
