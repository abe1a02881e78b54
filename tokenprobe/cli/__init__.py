"""Command line interface for tokenprobe."""

from .argument_parser import ArgumentParser
from .main import main, format_result

__all__ = ["ArgumentParser", "main", "format_result"]
