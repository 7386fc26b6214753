"""
QuadSight API - 主应用入口

基于 Clean/Hexagonal Architecture 的 2x2 矩阵分析 API 服务。

特性：
- LLM 选轴与条目定位（未配置或失败时降级为演示结果）
- 受限规则语言的自定义象限
- 文件文本提取（TXT / PDF / DOCX / DOC）
- 临时存储与定期清理
- 结构化日志与统一错误响应
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quadsight.api.dependencies import ServiceContainer, Settings, get_settings
from quadsight.api.routes import analysis_router, files_router, health_router
from quadsight.api.schemas import ErrorResponse
from quadsight.infrastructure.errors import QuadSightError
from quadsight.infrastructure.logging import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    container: ServiceContainer = app.state.container
    logger.info("QuadSight API 正在启动...")

    container.start()
    logger.info("服务容器启动完成")

    yield

    logger.info("QuadSight API 正在关闭...")
    container.shutdown()


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    创建 FastAPI 应用实例

    Args:
        settings: 应用配置（默认读取环境变量）
        container: 服务容器（默认按配置创建）
    """
    settings = settings or get_settings()
    setup_logging(
        level=settings.LOG_LEVEL,
        json_format=settings.LOG_JSON,
        log_file=settings.LOG_FILE,
    )

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
# QuadSight API

把非结构化文本变成 2x2 矩阵分析。

## 功能特性

- 🧭 **自动选轴**：选出最能区分条目的两个变量
- 📍 **条目定位**：给出 0-100 坐标、置信度、理由与引用
- 🧩 **自定义象限**：受限规则语言，如 `x >= 50 && y >= 50`
- 💡 **数据洞察**：聚集、置信度、离群、趋势、优先关注
- 📤 **导出**：JSON、CSV、Markdown、HTML、纯文本

## 快速开始

```python
import httpx

response = httpx.post(
    "http://localhost:8000/api/analyze",
    json={"text": "Vendor outage is likely and severe; a data breach is rare but catastrophic.", "domain_hint": "risk"}
)
print(response.json()["quadrants"])
```
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container or ServiceContainer(settings)

    # CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()

        # 生成请求 ID
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = (time.perf_counter() - start_time) * 1000
            logger.error(f"[{request_id}] 错误 - {duration:.2f}ms - {str(e)}")
            raise

        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"[{request_id}] 完成 {response.status_code} - {duration:.2f}ms",
            extra={"request_id": request_id, "duration_ms": duration},
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.2f}ms"
        return response

    # 业务异常处理
    @app.exception_handler(QuadSightError)
    async def quadsight_exception_handler(request: Request, exc: QuadSightError):
        logger.warning(f"请求失败 [{exc.error_code.value}]: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=exc.error_code.value,
                error_message=exc.message,
                details=exc.details,
                request_id=getattr(request.state, "request_id", None),
            ).model_dump(mode="json"),
        )

    # 全局异常处理
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理的异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error_code="internal_error",
                error_message="服务器内部错误，请稍后重试",
                request_id=getattr(request.state, "request_id", None),
            ).model_dump(mode="json"),
        )

    # 注册路由
    app.include_router(health_router)
    app.include_router(analysis_router)
    app.include_router(files_router)

    return app


# 创建应用实例
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "quadsight.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
