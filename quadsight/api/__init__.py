"""
API 层 - FastAPI 路由定义

提供 RESTful API 接口，作为系统的统一入口。

包含：
- /api/analyze: 矩阵分析
- /api/files: 文件上传与文本提取
- /api/analyses: 分析记录查询、条目表、图表数据与导出
- /api/classify: 单点分类
- /health: 健康检查
- /ready, /live: Kubernetes 探针
"""

from quadsight.api.main import app, create_app
from quadsight.api.schemas import (
    AnalyzeRequest,
    ClassifyRequest,
    AnalysisResponse,
    HealthResponse,
    ErrorResponse,
)
from quadsight.api.dependencies import (
    get_orchestrator,
    get_report_writer,
    get_settings,
    ServiceContainer,
    Settings,
)

__all__ = [
    # 应用
    "app",
    "create_app",
    # 请求模型
    "AnalyzeRequest",
    "ClassifyRequest",
    # 响应模型
    "AnalysisResponse",
    "HealthResponse",
    "ErrorResponse",
    # 依赖
    "get_orchestrator",
    "get_report_writer",
    "get_settings",
    "ServiceContainer",
    "Settings",
]
