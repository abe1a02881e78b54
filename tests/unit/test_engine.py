import pytest
import torch
from types import SimpleNamespace
from unittest.mock import patch, MagicMock

from tokenprobe.infrastructure.model import TransformersEngine
from tokenprobe.utils.error_manager import DecodeError, ModelError, ErrorCode


class TestTransformersEngine:
    """Test suite for the transformers-backed engine."""

    def test_initialization(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        assert engine.n_ctx == 8
        assert engine.n_vocab == 10
        assert engine.model_id == "tiny-lm"
        assert not engine.is_closed

    def test_initialization_with_invalid_model(self, mock_tokenizer):
        with pytest.raises(AssertionError, match="Model cannot be None"):
            TransformersEngine(None, mock_tokenizer)

    def test_context_window_override(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer, n_ctx=4)
        assert engine.n_ctx == 4

    def test_context_window_from_n_positions(self, tiny_model, mock_tokenizer):
        tiny_model.config = SimpleNamespace(n_positions=32, vocab_size=10)
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        assert engine.n_ctx == 32

    def test_context_window_from_tokenizer(self, tiny_model, mock_tokenizer):
        tiny_model.config = SimpleNamespace(vocab_size=10)
        mock_tokenizer.model_max_length = 64
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        assert engine.n_ctx == 64

    def test_unknown_context_window(self, tiny_model, mock_tokenizer):
        tiny_model.config = SimpleNamespace(vocab_size=10)
        with pytest.raises(ModelError, match="context window"):
            TransformersEngine(tiny_model, mock_tokenizer)

    def test_vocab_size_falls_back_to_tokenizer(self, tiny_model, mock_tokenizer):
        tiny_model.config = SimpleNamespace(max_position_embeddings=8)
        mock_tokenizer.__len__.return_value = 12
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        assert engine.n_vocab == 12

    def test_tokenize(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        with_bos = engine.tokenize("ab", add_special_tokens=True)
        without_bos = engine.tokenize("ab", add_special_tokens=False)

        assert with_bos[0] == 1
        assert with_bos[1:] == without_bos
        mock_tokenizer.encode.assert_called_with("ab", add_special_tokens=False)

    def test_decode_last_logits_returns_last_position(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        logits = engine.decode_last_logits([1, 2, 3])

        assert logits.shape == (10,)
        assert torch.allclose(logits, 3 * tiny_model.weight)
        # A single batch row holding the whole prompt
        assert tiny_model.calls[0].tolist() == [[1, 2, 3]]

    def test_decode_empty_prompt(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        with pytest.raises(DecodeError) as exc_info:
            engine.decode_last_logits([])
        assert exc_info.value.code == ErrorCode.MODEL_DECODE_FAILED

    def test_decode_failure_is_wrapped(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        with patch.object(tiny_model, "forward", side_effect=RuntimeError("out of memory")):
            with pytest.raises(DecodeError, match="out of memory") as exc_info:
                engine.decode_last_logits([1, 2])
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_token_to_piece(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        assert engine.token_to_piece(5) == "<5>"
        mock_tokenizer.decode.assert_called_with(
            [5], skip_special_tokens=False, clean_up_tokenization_spaces=False
        )

    def test_close(self, tiny_model, mock_tokenizer):
        engine = TransformersEngine(tiny_model, mock_tokenizer)
        engine.close()
        engine.close()

        assert engine.is_closed
        for call in (
            lambda: engine.tokenize("a"),
            lambda: engine.token_to_piece(1),
            lambda: engine.decode_last_logits([1]),
        ):
            with pytest.raises(ModelError) as exc_info:
                call()
            assert exc_info.value.code == ErrorCode.MODEL_NOT_AVAILABLE

    def test_from_pretrained(self, tiny_model, mock_tokenizer):
        with patch(
            "tokenprobe.infrastructure.model.engine.load_model",
            return_value=(tiny_model, mock_tokenizer),
        ) as load:
            engine = TransformersEngine.from_pretrained(model_id="tiny-lm", device="cpu", n_ctx=6)

        load.assert_called_once_with(model_id="tiny-lm", device="cpu")
        assert engine.n_ctx == 6
        assert engine.device == "cpu"

    def test_from_pretrained_auto_device(self, tiny_model, mock_tokenizer):
        with patch(
            "tokenprobe.infrastructure.model.engine.get_best_device", return_value="cpu"
        ), patch(
            "tokenprobe.infrastructure.model.engine.load_model",
            return_value=(tiny_model, mock_tokenizer),
        ) as load:
            TransformersEngine.from_pretrained(model_id="tiny-lm", device="auto")

        assert load.call_args.kwargs["device"] == "cpu"


class TestTokenizerAdapter:
    """Test suite for the tokenizer adapter."""

    def test_empty_text(self, mock_tokenizer):
        from tokenprobe.infrastructure.tokenization import TokenizerAdapter

        adapter = TokenizerAdapter(mock_tokenizer)
        assert adapter.encode("") == []
        mock_tokenizer.encode.assert_not_called()

    def test_tokenizer_failure_is_wrapped(self):
        from tokenprobe.infrastructure.tokenization import TokenizerAdapter
        from tokenprobe.utils.error_manager import TokenizationError

        tokenizer = MagicMock()
        tokenizer.encode.side_effect = ValueError("bad input")
        adapter = TokenizerAdapter(tokenizer)

        with pytest.raises(TokenizationError) as exc_info:
            adapter.encode("text")
        assert exc_info.value.code == ErrorCode.TOKENIZE_FAILED

    def test_model_max_length_ignores_sentinel(self, mock_tokenizer):
        from tokenprobe.infrastructure.tokenization import TokenizerAdapter

        assert TokenizerAdapter(mock_tokenizer).model_max_length is None
        mock_tokenizer.model_max_length = 1024
        assert TokenizerAdapter(mock_tokenizer).model_max_length == 1024
