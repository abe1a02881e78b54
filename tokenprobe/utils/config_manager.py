"""
Configuration Manager for tokenprobe.

This module provides the centralized configuration system for the CLI and the
HTTP server. Settings come from defaults, environment variables
(``TOKENPROBE_<SECTION>_<KEY>``) and optional JSON or YAML files.
"""

import os
import json
from typing import Dict, Any, Optional, Union, List
from pathlib import Path
from dataclasses import dataclass, field, asdict

import yaml


ENV_PREFIX = "TOKENPROBE_"


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass
class LoggingConfig:
    """Configuration settings for logging."""

    enable_file_logging: bool = False
    log_dir: str = field(default_factory=lambda: os.path.join(os.getcwd(), "logs"))
    log_level: str = "INFO"
    console_logging: bool = True

    def __post_init__(self):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {valid_levels}"
            )

        self.log_level = self.log_level.upper()


@dataclass
class ModelConfig:
    """Configuration settings for model loading and inference."""

    model_id: str = "gpt2"
    device: Optional[str] = None  # None means auto-detect
    torch_dtype: Optional[str] = None  # None, "float16", "bfloat16", "float32"
    n_ctx: Optional[int] = None  # None means use the model's own window
    trust_remote_code: bool = False
    use_fast_tokenizer: bool = True
    revision: Optional[str] = None
    low_cpu_mem_usage: bool = True

    def __post_init__(self):
        """Validate model configuration."""
        valid_devices = [None, "auto", "cpu", "cuda", "mps"]
        if self.device not in valid_devices:
            raise ConfigurationError(
                f"Invalid device: {self.device}. Must be one of {valid_devices}"
            )

        valid_dtypes = [None, "float16", "bfloat16", "float32"]
        if self.torch_dtype not in valid_dtypes:
            raise ConfigurationError(
                f"Invalid torch_dtype: {self.torch_dtype}. Must be one of {valid_dtypes}"
            )

        if self.n_ctx is not None and self.n_ctx < 1:
            raise ConfigurationError(f"n_ctx must be >= 1, got {self.n_ctx}")


@dataclass
class ProbeConfig:
    """Configuration settings for probability lookups."""

    default_prompt: str = "Hello my name is"
    stable_softmax: bool = True


@dataclass
class ApiConfig:
    """Configuration settings for the HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        """Validate API configuration."""
        if self.port < 1 or self.port > 65535:
            raise ConfigurationError(
                f"port must be between 1 and 65535, got {self.port}"
            )


@dataclass
class DebugConfig:
    """Configuration settings for debugging."""

    global_debug: bool = False
    module_debug: Dict[str, bool] = field(default_factory=dict)

    def is_debug_enabled(self, module_name: str) -> bool:
        """
        Check if debug is enabled for a module.

        Args:
            module_name: Name of the module

        Returns:
            bool: Whether debug is enabled for the module
        """
        env_var = f"{ENV_PREFIX}DEBUG_{module_name.upper()}"
        if env_var in os.environ:
            return _parse_bool(os.environ[env_var])

        if module_name in self.module_debug:
            return self.module_debug[module_name]

        return self.global_debug


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def load_file_data(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read the raw ``{section: {key: value}}`` mapping of a JSON or YAML file.

    Only the keys present in the file are returned, so applying the result with
    ``TokenProbeConfig.update`` leaves every other setting untouched.

    Args:
        file_path: Path to the configuration file

    Returns:
        Dict[str, Any]: Mapping read from the file
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        with file_path.open("r") as f:
            if file_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got {type(data).__name__}"
        )
    return data


@dataclass
class TokenProbeConfig:
    """
    Central configuration class for tokenprobe.

    Holds every section in a structured way so the CLI, the server and the
    tests read settings from one place.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "TokenProbeConfig":
        """
        Create a configuration instance from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            TokenProbeConfig: Configuration instance with values from the environment
        """
        environ = os.environ if environ is None else environ
        config = cls()

        for env_name, env_value in environ.items():
            if not env_name.startswith(ENV_PREFIX):
                continue

            if env_name == f"{ENV_PREFIX}DEBUG":
                config.debug.global_debug = _parse_bool(env_value)
                continue

            # Module-specific debug flags
            if env_name.startswith(f"{ENV_PREFIX}DEBUG_"):
                module_name = env_name.replace(f"{ENV_PREFIX}DEBUG_", "", 1).lower()
                config.debug.module_debug[module_name] = _parse_bool(env_value)
                continue

            parts = env_name.replace(ENV_PREFIX, "", 1).lower().split("_", 1)
            if len(parts) != 2:
                continue

            section, key = parts
            if not hasattr(config, section):
                continue
            section_obj = getattr(config, section)
            if not hasattr(section_obj, key):
                continue

            current_value = getattr(section_obj, key)
            try:
                if isinstance(current_value, bool):
                    new_value = _parse_bool(env_value)
                elif isinstance(current_value, int) or key == "n_ctx":
                    new_value = int(env_value)
                elif isinstance(current_value, float):
                    new_value = float(env_value)
                elif isinstance(current_value, list):
                    new_value = env_value.split(",")
                else:
                    new_value = env_value
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_name}: {e}")

            setattr(section_obj, key, new_value)

        config.validate()
        return config

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "TokenProbeConfig":
        """
        Load configuration from a JSON or YAML file on top of the defaults.

        Args:
            file_path: Path to the configuration file

        Returns:
            TokenProbeConfig: Configuration instance with values from the file
        """
        config = cls()
        config.update(load_file_data(file_path))
        return config

    def update(self, data: Dict[str, Any]) -> None:
        """
        Apply a nested ``{section: {key: value}}`` mapping onto this config.

        Unknown sections and keys are ignored.
        """
        for section_name, section_data in data.items():
            if not hasattr(self, section_name) or not isinstance(section_data, dict):
                continue

            section = getattr(self, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)

        self.validate()

    def validate(self) -> None:
        """Re-run the per-section validation after values were changed."""
        for section in (self.logging, self.model, self.api):
            section.__post_init__()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Dict[str, Any]: Configuration as a nested dictionary
        """
        return {
            "logging": asdict(self.logging),
            "model": asdict(self.model),
            "probe": asdict(self.probe),
            "api": asdict(self.api),
            "debug": {
                "global_debug": self.debug.global_debug,
                "module_debug": self.debug.module_debug,
            },
        }

    def get_debug_mode(self, module_name: str) -> bool:
        """Get debug mode for a specific module."""
        return self.debug.is_debug_enabled(module_name)


# Global configuration instance, initialized from defaults and the environment
config = TokenProbeConfig.from_env()


def get_debug_mode(module_name: str) -> bool:
    """
    Get debug mode for a specific module.

    Args:
        module_name: Name of the module

    Returns:
        bool: Whether debug is enabled for the module
    """
    return config.get_debug_mode(module_name)
