"""
Utilities module for tokenprobe.

This package provides configuration, logging and error handling shared across
the project.
"""

# Re-export the configuration manager for easy imports
from tokenprobe.utils.config_manager import config, TokenProbeConfig, get_debug_mode

__all__ = ["config", "TokenProbeConfig", "get_debug_mode"]
