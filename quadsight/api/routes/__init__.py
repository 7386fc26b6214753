"""
路由包初始化
"""

from quadsight.api.routes.analysis import router as analysis_router
from quadsight.api.routes.files import router as files_router
from quadsight.api.routes.health import router as health_router

__all__ = [
    "analysis_router",
    "files_router",
    "health_router",
]
