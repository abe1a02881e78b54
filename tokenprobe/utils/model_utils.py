"""
Model utilities for tokenprobe.

Centralized device detection, dtype selection and model loading so the CLI and
the server load the engine the same way.
"""

import time
from typing import Optional

import torch
from transformers import (
    AutoModelForCausalLM,
    AutoTokenizer,
    AutoConfig,
    PreTrainedModel,
    PreTrainedTokenizerBase,
)

from tokenprobe.utils import config
from tokenprobe.utils.logger import get_logger
from tokenprobe.utils.error_manager import ErrorCode
from tokenprobe.utils.exception_handlers import handle_model_errors

logger = get_logger("model_utils")

DEFAULT_MODEL_ID = "gpt2"
SUPPORTED_DEVICES = ["cuda", "mps", "cpu", "auto"]


def get_best_device() -> str:
    """
    Determine the best available device for model execution.

    First checks configuration, then auto-detects based on available hardware.

    Returns:
        str: 'cuda', 'mps' or 'cpu'
    """
    if config.model.device and config.model.device != "auto":
        logger.info(f"Using device from configuration: {config.model.device}")
        return config.model.device

    if torch.cuda.is_available():
        logger.info(f"Auto-detected CUDA device: {torch.cuda.get_device_name(0)}")
        return "cuda"
    elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        logger.info("Auto-detected Apple Silicon MPS device")
        return "mps"

    logger.info("No GPU detected, using CPU device")
    return "cpu"


def get_device_dtype(device: Optional[str] = None) -> torch.dtype:
    """
    Determine the appropriate dtype based on the device.

    Args:
        device: Device string ('cuda', 'mps', 'cpu', or None for auto-detection)

    Returns:
        torch.dtype: The dtype to load weights in
    """
    if device is None or device == "auto":
        device = get_best_device()

    if config.model.torch_dtype:
        dtype = getattr(torch, config.model.torch_dtype)
        logger.info(f"Using dtype from configuration: {dtype}")
        return dtype

    if device == "cuda":
        # bfloat16 for Ampere and later GPUs, float16 for older ones
        if torch.cuda.is_available() and torch.cuda.get_device_capability()[0] >= 8:
            return torch.bfloat16
        return torch.float16

    # MPS and CPU are most stable with float32
    return torch.float32


@handle_model_errors(
    error_message="Failed to load model", error_code=ErrorCode.MODEL_LOAD_FAILED
)
def load_model(
    model_id: Optional[str] = None,
    device: Optional[str] = None,
    torch_dtype: Optional[torch.dtype] = None,
    revision: Optional[str] = None,
    use_fast_tokenizer: Optional[bool] = None,
    trust_remote_code: Optional[bool] = None,
) -> tuple[PreTrainedModel, PreTrainedTokenizerBase]:
    """
    Load a causal language model and its tokenizer.

    Args:
        model_id: Model identifier or local path (defaults to config)
        device: Device to load the model on (defaults to auto-detection)
        torch_dtype: Weight dtype (defaults to per-device choice)
        revision: Model revision to load
        use_fast_tokenizer: Whether to use the fast tokenizer implementation
        trust_remote_code: Whether to trust remote code for the model

    Returns:
        Tuple of (model, tokenizer), model in eval mode on ``device``

    Raises:
        ModelError: If model loading fails
    """
    start_time = time.time()

    model_id = model_id or config.model.model_id or DEFAULT_MODEL_ID
    revision = revision or config.model.revision

    if device is None or device == "auto":
        device = get_best_device()
    if device not in SUPPORTED_DEVICES:
        raise ValueError(f"Unsupported device: {device}")

    if torch_dtype is None:
        torch_dtype = get_device_dtype(device)

    if use_fast_tokenizer is None:
        use_fast_tokenizer = config.model.use_fast_tokenizer
    if trust_remote_code is None:
        trust_remote_code = config.model.trust_remote_code

    logger.info(f"Loading model: {model_id} on device: {device} with dtype: {torch_dtype}")

    model_config = AutoConfig.from_pretrained(
        model_id, revision=revision, trust_remote_code=trust_remote_code
    )

    tokenizer = AutoTokenizer.from_pretrained(
        model_id,
        use_fast=use_fast_tokenizer,
        trust_remote_code=trust_remote_code,
        revision=revision,
    )

    model_args = {
        "config": model_config,
        "torch_dtype": torch_dtype,
        "low_cpu_mem_usage": config.model.low_cpu_mem_usage,
        "trust_remote_code": trust_remote_code,
        "revision": revision,
    }
    if device == "cuda":
        model_args["device_map"] = "auto"

    model = AutoModelForCausalLM.from_pretrained(model_id, **model_args)
    if device != "cuda":
        model = model.to(device)
    model.eval()

    logger.info(f"Total model loading time: {time.time() - start_time:.2f}s")
    return model, tokenizer
