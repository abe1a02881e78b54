"""Probability value objects.

A ``ProbeResult`` lives for one request or one CLI invocation; nothing is
persisted.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TokenProbability:
    """Probability of one target token at the position after the prompt."""
    token_id: int
    token: str
    probability: float

    def __post_init__(self):
        if self.token_id < 0:
            raise ValueError(f"Token ID must be non-negative, got {self.token_id}")
        # NaN is allowed: the plain softmax can overflow
        if not math.isnan(self.probability) and not (0.0 <= self.probability <= 1.0):
            raise ValueError(f"Probability must be between 0 and 1, got {self.probability}")

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; a non-finite probability becomes None (JSON null)."""
        return {"token": self.token, "probability": _finite_or_none(self.probability)}


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probability lookup."""
    prompt: str
    prompt_token_count: int
    tokens: List[TokenProbability] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "prompt_token_count": self.prompt_token_count,
            "tokens": [
                {"token_id": t.token_id, **t.to_dict()}
                for t in self.tokens
            ],
            "elapsed_seconds": self.elapsed_seconds,
        }


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None
