"""
编排层 - 分析流程编排

负责：
1. 调用内容分析器（失败时降级为占位结果）
2. 构建象限集合
3. 聚合数据洞察

包含：
- AnalysisOrchestrator: 分析编排器
- create_orchestrator: 工厂函数
"""

from quadsight.orchestrator.orchestrator import (
    AnalysisOrchestrator,
    DEMO_MODE_NOTE,
    FALLBACK_NOTE,
    create_orchestrator,
    placeholder_output,
)

__all__ = [
    "AnalysisOrchestrator",
    "DEMO_MODE_NOTE",
    "FALLBACK_NOTE",
    "create_orchestrator",
    "placeholder_output",
]
