"""
健康检查路由 - 系统状态监控 API
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from quadsight.api.dependencies import ServiceContainer, Settings, get_app_settings, get_service_container
from quadsight.api.schemas import HealthResponse


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

OPERATIONAL = "operational"
DEGRADED = "degraded"
NOT_CONFIGURED = "not_configured"
UNAVAILABLE = "unavailable"


def check_analyzer(container: ServiceContainer) -> str:
    """分析器状态：未配置 / 正常 / 降级 / 不可用"""
    if container.analyzer is None:
        return NOT_CONFIGURED
    try:
        return OPERATIONAL if container.analyzer.ping() else DEGRADED
    except Exception as e:
        logger.warning(f"分析器连通性检查失败: {e}")
        return UNAVAILABLE


def overall_status(components: dict) -> str:
    """任一组件不可用为 degraded，存在未配置组件为 partial，否则 healthy"""
    states = set(components.values())
    if UNAVAILABLE in states:
        return "degraded"
    if NOT_CONFIGURED in states:
        return "partial"
    return "healthy"


@router.get(
    "/",
    summary="API 根节点",
    description="返回欢迎信息和 API 基本信息"
)
async def root(settings: Settings = Depends(get_app_settings)):
    """API 根节点"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "服务降级"}},
    summary="健康检查",
    description="检查服务及其依赖组件的健康状态；degraded 时返回 503"
)
def health_check(
    container: ServiceContainer = Depends(get_service_container),
    settings: Settings = Depends(get_app_settings),
):
    """健康检查"""
    start_time = time.perf_counter()

    components = {
        "analyzer": check_analyzer(container),
        "store": OPERATIONAL,
        "file_processing": OPERATIONAL,
    }
    status = overall_status(components)
    # 清理任务状态只做展示，不参与总体状态
    components["eviction"] = "running" if container.scheduler_running else "stopped"

    now = datetime.now(timezone.utc)
    health = HealthResponse(
        status=status,
        timestamp=now,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        uptime_seconds=(now - container.started_at).total_seconds(),
        response_time_ms=(time.perf_counter() - start_time) * 1000,
        components=components,
    )
    return JSONResponse(
        status_code=503 if status == "degraded" else 200,
        content=health.model_dump(mode="json"),
    )


@router.get(
    "/ready",
    summary="就绪检查",
    description="检查服务是否准备好接收请求（用于 Kubernetes 就绪探针）"
)
async def readiness_check():
    """就绪检查"""
    return {"ready": True}


@router.get(
    "/live",
    summary="存活检查",
    description="检查服务是否存活（用于 Kubernetes 存活探针）"
)
async def liveness_check():
    """存活检查"""
    return {"alive": True}
