import math
import threading

import pytest
import torch

from tokenprobe.application.services import ProbabilityService
from tokenprobe.utils.error_manager import (
    ValidationError,
    ContextWindowExceededError,
    DecodeError,
    ModelError,
    ErrorCode,
)


class TestProbabilityService:
    """Test suite for the probability lookup service."""

    def test_initialization_with_invalid_engine(self):
        with pytest.raises(AssertionError, match="Engine cannot be None"):
            ProbabilityService(None)

    def test_entries_follow_target_order(self, fake_engine):
        service = ProbabilityService(fake_engine)
        result = service.compute("Hi", "b,a")

        assert [e.token for e in result.tokens] == ["b", "a"]
        assert [e.token_id for e in result.tokens] == [ord("b") - 31, ord("a") - 31]
        assert result.prompt == "Hi"
        assert result.prompt_token_count == 3

    def test_probabilities_match_softmax_of_logits(self, fake_engine):
        service = ProbabilityService(fake_engine)
        result = service.compute("Hi", "a")

        expected = torch.softmax(fake_engine.logits, dim=0)[ord("a") - 31]
        assert math.isclose(result.tokens[0].probability, float(expected), rel_tol=1e-5)

    def test_prompt_has_special_tokens_and_targets_do_not(self, fake_engine):
        service = ProbabilityService(fake_engine)
        service.compute("Hi", "x,y")

        assert fake_engine.tokenize_calls == [("Hi", True), ("x", False), ("y", False)]
        assert fake_engine.decoded == [[0, ord("H") - 31, ord("i") - 31]]

    def test_duplicate_targets_repeat_entries(self, fake_engine):
        result = ProbabilityService(fake_engine).compute("Hi", "a,a")
        assert len(result.tokens) == 2
        assert result.tokens[0] == result.tokens[1]

    def test_prompt_filling_context_window_is_accepted(self, engine_factory):
        # BOS + 3 characters fills a 4-token window exactly
        engine = engine_factory(n_ctx=4)
        result = ProbabilityService(engine).compute("abc", "d")
        assert result.prompt_token_count == 4

    def test_prompt_exceeding_context_window(self, engine_factory):
        engine = engine_factory(n_ctx=4)
        service = ProbabilityService(engine)

        with pytest.raises(ContextWindowExceededError) as exc_info:
            service.compute("abcd", "d")

        assert exc_info.value.code == ErrorCode.CONTEXT_WINDOW_EXCEEDED
        assert exc_info.value.n_tokens == 5
        assert exc_info.value.n_ctx == 4
        assert engine.decoded == []

    @pytest.mark.parametrize("prompt,targets,field", [
        ("", "a", "prompt"),
        ("Hi", "", "target_chars"),
        (None, "a", "prompt"),
    ])
    def test_missing_fields(self, fake_engine, prompt, targets, field):
        service = ProbabilityService(fake_engine)
        with pytest.raises(ValidationError, match=f"Missing or empty field: {field}") as exc_info:
            service.compute(prompt, targets)
        assert exc_info.value.field == field
        assert fake_engine.tokenize_calls == []

    def test_decode_failure_propagates(self, fake_engine):
        fake_engine.decode_error = DecodeError("forward pass failed")
        with pytest.raises(DecodeError):
            ProbabilityService(fake_engine).compute("Hi", "a")

    def test_target_outside_vocabulary(self, engine_factory):
        engine = engine_factory(logits=torch.zeros(10))
        with pytest.raises(ValidationError, match="outside the vocabulary"):
            ProbabilityService(engine).compute("Hi", "z")

    def test_plain_softmax_yields_nan_on_overflow(self, engine_factory):
        logits = torch.zeros(96)
        logits[ord("a") - 31] = 1000.0
        engine = engine_factory(logits=logits)

        stable = ProbabilityService(engine).compute("Hi", "a")
        plain = ProbabilityService(engine, stable_softmax=False).compute("Hi", "a")

        assert math.isclose(stable.tokens[0].probability, 1.0, rel_tol=1e-6)
        assert math.isnan(plain.tokens[0].probability)
        assert plain.to_dict()["tokens"][0]["probability"] is None

    def test_close_releases_engine(self, fake_engine):
        service = ProbabilityService(fake_engine)
        service.close()

        assert fake_engine.is_closed
        with pytest.raises(ModelError) as exc_info:
            service.compute("Hi", "a")
        assert exc_info.value.code == ErrorCode.MODEL_NOT_AVAILABLE

    def test_concurrent_lookups_do_not_interleave(self, fake_engine):
        service = ProbabilityService(fake_engine)
        active = []
        overlaps = []
        original = fake_engine.decode_last_logits

        def tracking_decode(token_ids):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            try:
                return original(token_ids)
            finally:
                active.pop()

        fake_engine.decode_last_logits = tracking_decode
        threads = [
            threading.Thread(target=service.compute, args=("Hi", "a"))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == []
        assert len(fake_engine.decoded) == 8

    def test_result_serialization(self, fake_engine):
        result = ProbabilityService(fake_engine).compute("Hi", "a")
        data = result.to_dict()

        assert data["tokens"][0]["token_id"] == ord("a") - 31
        assert data["tokens"][0]["token"] == "a"
        assert result.tokens[0].to_dict() == {
            "token": "a",
            "probability": result.tokens[0].probability,
        }
