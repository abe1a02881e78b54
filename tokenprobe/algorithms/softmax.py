"""Softmax normalization of a single logits row."""

from typing import Sequence, Union

import numpy as np
import torch

from tokenprobe.utils.error_manager import ValidationError

LogitsLike = Union[torch.Tensor, np.ndarray, Sequence[float]]


def softmax(logits: LogitsLike, stable: bool = True) -> torch.Tensor:
    """
    Convert raw scores into a probability vector.

    Entry i of the result is ``exp(logits[i]) / sum(exp(logits))``, computed
    in float32 on the input's device.

    Args:
        logits: 1-D scores, one per vocabulary entry
        stable: Subtract the maximum logit before exponentiating. With
            ``stable=False`` large logits overflow to inf and the result
            contains NaN.

    Returns:
        1-D float32 tensor of the same length as ``logits``

    Raises:
        ValidationError: If ``logits`` is not a non-empty 1-D array
    """
    scores = torch.as_tensor(logits).detach().float()

    if scores.dim() != 1:
        raise ValidationError(
            f"Logits must be 1-dimensional, got shape {tuple(scores.shape)}"
        )
    if scores.numel() == 0:
        raise ValidationError("Logits must not be empty")

    if stable:
        scores = scores - scores.max()

    exp_scores = torch.exp(scores)
    return exp_scores / exp_scores.sum()
