"""
QuadSight - 把非结构化文本变成 2x2 矩阵分析

基于 Clean/Hex 六边形架构构建，提供：
- 受限规则语言的象限分类
- 默认/自定义象限集合
- 基于阈值的数据洞察
- LLM 驱动的坐标轴选择与条目定位（不可用时降级为演示结果）

架构层次：
- domain: 核心领域模型与纯计算逻辑
- ports: 端口接口定义
- adapters: 外部服务适配器（LiteLLM、文档提取、内存存储）
- use_cases: 业务用例
- orchestrator: 分析编排
- presentation: 报告与导出
- infrastructure: 基础设施（日志、错误、定期清理）
- api: FastAPI 路由

快速开始：
```python
from quadsight.orchestrator import create_orchestrator

result = create_orchestrator().run("Vendor outage, data breach, key staff leaving...", "risk")
print(result.axes, [q.name for q in result.quadrants])

# HTTP 服务
from quadsight.api import create_app
app = create_app()
```
"""

__version__ = "1.0.0"
__author__ = "QuadSight Team"

# 核心领域模型
from quadsight.domain import (
    AnalysisResult,
    Axes,
    Domain,
    ForcedAxes,
    Item,
    Point,
    Quadrant,
    build_default_quadrants,
    build_quadrant_set,
    classify,
    compile_rule,
)

# 编排器
from quadsight.orchestrator import (
    AnalysisOrchestrator,
    create_orchestrator,
)

# 报告生成
from quadsight.presentation import (
    ReportWriter,
    ReportFormat,
    create_report_writer,
)

__all__ = [
    # 版本信息
    "__version__",
    "__author__",
    # 领域模型
    "AnalysisResult",
    "Axes",
    "Domain",
    "ForcedAxes",
    "Item",
    "Point",
    "Quadrant",
    "build_default_quadrants",
    "build_quadrant_set",
    "classify",
    "compile_rule",
    # 编排器
    "AnalysisOrchestrator",
    "create_orchestrator",
    # 报告
    "ReportWriter",
    "ReportFormat",
    "create_report_writer",
]
