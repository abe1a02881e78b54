"""Probability lookup service.

Tokenizes the prompt, evaluates it once, normalizes the last-position logits
and reports the probability of every target token.
"""

import threading
import time
from typing import List

from tokenprobe.algorithms import softmax, parse_target_tokens
from tokenprobe.domain.entities import TokenProbability, ProbeResult
from tokenprobe.domain.interfaces import InferenceEngine
from tokenprobe.utils.error_manager import ValidationError, ContextWindowExceededError
from tokenprobe.utils.logging_utils import LoggingMixin


class ProbabilityService(LoggingMixin):
    """Computes next-token probabilities for comma-separated targets."""

    def __init__(self, engine: InferenceEngine, stable_softmax: bool = True):
        """Initialize the service.

        Args:
            engine: Engine shared by every request
            stable_softmax: Subtract the max logit before exponentiating
        """
        assert engine is not None, "Engine cannot be None"

        self.engine = engine
        self.stable_softmax = stable_softmax
        # The engine holds a single model context; calls must not interleave
        self._lock = threading.Lock()
        self.setup_logging("probability_service")

    def close(self) -> None:
        """Release the engine once any in-flight lookup has finished."""
        with self._lock:
            self.engine.close()

    def parse_targets(self, target_chars: str) -> List[int]:
        """Tokenize each comma-separated target without special tokens."""
        return parse_target_tokens(
            lambda piece: self.engine.tokenize(piece, add_special_tokens=False),
            target_chars,
        )

    def compute(self, prompt: str, target_chars: str) -> ProbeResult:
        """Report the probability of each target token following ``prompt``.

        Args:
            prompt: Text evaluated by the model
            target_chars: Comma-separated target strings

        Returns:
            ProbeResult with one entry per parsed target token, in parse order

        Raises:
            ValidationError: Empty prompt or targets, or a prompt with no tokens
            ContextWindowExceededError: Prompt longer than the context window
            DecodeError: The engine failed to evaluate the prompt
        """
        _require_text(prompt, "prompt")
        _require_text(target_chars, "target_chars")

        start_time = time.time()
        with self._lock, self.operation("probability lookup"):
            prompt_tokens = self.engine.tokenize(prompt, add_special_tokens=True)
            if not prompt_tokens:
                raise ValidationError("Prompt produced no tokens", field="prompt")

            n_ctx = self.engine.n_ctx
            if len(prompt_tokens) > n_ctx:
                raise ContextWindowExceededError(len(prompt_tokens), n_ctx)

            logits = self.engine.decode_last_logits(prompt_tokens)
            probs = softmax(logits, stable=self.stable_softmax)

            target_tokens = self.parse_targets(target_chars)
            self.log(
                f"Prompt tokens: {len(prompt_tokens)}, target tokens: {target_tokens}",
                "debug",
            )

            entries = []
            for token_id in target_tokens:
                if token_id >= probs.shape[0]:
                    raise ValidationError(
                        f"Target token {token_id} is outside the vocabulary",
                        field="target_chars",
                    )
                entries.append(
                    TokenProbability(
                        token_id=token_id,
                        token=self.engine.token_to_piece(token_id),
                        probability=float(probs[token_id]),
                    )
                )

        return ProbeResult(
            prompt=prompt,
            prompt_token_count=len(prompt_tokens),
            tokens=entries,
            elapsed_seconds=time.time() - start_time,
        )


def _require_text(value, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Missing or empty field: {field}", field=field)
