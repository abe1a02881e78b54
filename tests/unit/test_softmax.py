import math

import numpy as np
import pytest
import torch

from tokenprobe.algorithms import softmax
from tokenprobe.utils.error_manager import ValidationError


class TestSoftmax:
    """Test suite for softmax normalization."""

    def test_sums_to_one(self):
        probs = softmax(torch.randn(50))
        assert probs.shape == (50,)
        assert torch.all(probs >= 0)
        assert math.isclose(float(probs.sum()), 1.0, rel_tol=1e-5)

    def test_matches_exp_over_sum(self):
        """Entry i equals exp(l_i) / sum_j exp(l_j)."""
        logits = [1.0, 2.0, 3.0]
        denom = sum(math.exp(x) for x in logits)
        probs = softmax(logits)
        for i, x in enumerate(logits):
            assert math.isclose(float(probs[i]), math.exp(x) / denom, rel_tol=1e-6)

    def test_stable_and_plain_agree_on_small_logits(self):
        logits = torch.tensor([0.5, -1.0, 2.0, 0.0])
        assert torch.allclose(softmax(logits), softmax(logits, stable=False), atol=1e-7)

    def test_stable_handles_large_logits(self):
        probs = softmax(torch.tensor([1000.0, 1001.0, 999.0]))
        assert torch.all(torch.isfinite(probs))
        assert int(torch.argmax(probs)) == 1

    def test_plain_overflows_on_large_logits(self):
        probs = softmax(torch.tensor([1000.0, 1001.0]), stable=False)
        assert torch.isnan(probs).any()

    def test_accepts_numpy_input(self):
        probs = softmax(np.array([0.0, 0.0, 0.0, 0.0]))
        assert torch.allclose(probs, torch.full((4,), 0.25))

    def test_does_not_modify_input(self):
        logits = torch.tensor([3.0, 1.0])
        softmax(logits)
        assert torch.equal(logits, torch.tensor([3.0, 1.0]))

    def test_rejects_two_dimensional_input(self):
        with pytest.raises(ValidationError, match="1-dimensional"):
            softmax(torch.zeros(2, 3))

    def test_rejects_empty_input(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            softmax(torch.tensor([]))
