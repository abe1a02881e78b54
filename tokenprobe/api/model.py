"""
Engine management for the tokenprobe API.

``EngineManager`` owns the single engine of the server process, loads it
lazily from configuration when none was injected, and releases it on
shutdown.
"""

import threading
from typing import Optional

from tokenprobe.application.services import ProbabilityService
from tokenprobe.domain.interfaces import InferenceEngine
from tokenprobe.infrastructure.model import TransformersEngine
from tokenprobe.utils import config
from tokenprobe.utils.api_errors import ModelNotAvailableError
from tokenprobe.utils.error_manager import ModelError
from tokenprobe.utils.logger import get_logger

logger = get_logger("api-model")


class EngineManager:
    """
    Holds the engine and probability service shared across requests.
    """

    def __init__(self, engine: Optional[InferenceEngine] = None,
                 stable_softmax: Optional[bool] = None):
        """
        Args:
            engine: Preloaded engine; when None it is loaded on first use
            stable_softmax: Override for ``config.probe.stable_softmax``
        """
        self.stable_softmax = (
            config.probe.stable_softmax if stable_softmax is None else stable_softmax
        )
        self._engine = engine
        self._service = (
            ProbabilityService(engine, stable_softmax=self.stable_softmax)
            if engine is not None
            else None
        )
        self._load_lock = threading.Lock()
        self.shut_down = False
        # Set by the runner so that /shutdown can stop the listener
        self.server = None

    @property
    def engine(self) -> Optional[InferenceEngine]:
        return self._engine

    @property
    def is_loaded(self) -> bool:
        return self._engine is not None and not self._engine.is_closed

    def load(self) -> ProbabilityService:
        """
        Load the engine from configuration if needed.

        Raises:
            ModelNotAvailableError: If the server was shut down or loading failed
        """
        with self._load_lock:
            if self.shut_down:
                raise ModelNotAvailableError("Server is shutting down")

            if self._service is None:
                try:
                    engine = TransformersEngine.from_pretrained(
                        model_id=config.model.model_id,
                        device=config.model.device,
                        n_ctx=config.model.n_ctx,
                    )
                except ModelError as e:
                    raise ModelNotAvailableError(f"Model not available: {e.message}")

                self._engine = engine
                self._service = ProbabilityService(
                    engine, stable_softmax=self.stable_softmax
                )

            return self._service

    def get_service(self) -> ProbabilityService:
        """Return the probability service, loading the engine on first use."""
        if self._service is not None and not self.shut_down:
            return self._service
        return self.load()

    def shutdown(self) -> None:
        """
        Release the engine's model and tokenizer and stop the listener.
        """
        with self._load_lock:
            self.shut_down = True
            if self._service is not None:
                self._service.close()
            elif self._engine is not None:
                self._engine.close()

        logger.info("Engine released")

        if self.server is not None:
            logger.info("Stopping server")
            self.server.should_exit = True
