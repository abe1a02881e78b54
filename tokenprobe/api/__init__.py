"""
tokenprobe API package.

FastAPI application exposing ``POST /props``, ``POST /shutdown`` and
``GET /health``.
"""

from tokenprobe.api.app import create_app

__all__ = ["create_app"]
