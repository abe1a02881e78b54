"""
tokenprobe API routers package.
"""

from tokenprobe.api.routers.props import router as props_router
from tokenprobe.api.routers.common import router as common_router

__all__ = ["props_router", "common_router"]
