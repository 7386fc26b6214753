"""
领域层 - 核心实体与纯计算逻辑

包含：
- models: 条目、坐标轴、象限、分析结果等实体
- rules: 受限规则语言的解析与求值
- quadrants: 象限分类与象限集合构建
- insights: 数据洞察聚合
- domains: 分析领域的展示信息
"""

from quadsight.domain.models import (
    AnalysisMetadata,
    AnalysisResult,
    AnalyzerOutput,
    Axes,
    Domain,
    ErrorCode,
    ForcedAxes,
    GeneratedInsight,
    InsightKind,
    Item,
    Point,
    Quadrant,
)
from quadsight.domain.rules import (
    Rule,
    RuleParseError,
    compile_rule,
    evaluate,
)
from quadsight.domain.quadrants import (
    QuadrantSetError,
    build_default_quadrants,
    build_quadrant_set,
    classify,
    classify_items,
    group_by_quadrant,
)
from quadsight.domain.domains import (
    DOMAIN_PROFILES,
    DomainProfile,
    list_domain_profiles,
)
from quadsight.domain.insights import (
    aggregate,
    overall_confidence,
)

__all__ = [
    "AnalysisMetadata",
    "AnalysisResult",
    "AnalyzerOutput",
    "Axes",
    "Domain",
    "ErrorCode",
    "ForcedAxes",
    "GeneratedInsight",
    "InsightKind",
    "Item",
    "Point",
    "Quadrant",
    "Rule",
    "RuleParseError",
    "compile_rule",
    "evaluate",
    "QuadrantSetError",
    "build_default_quadrants",
    "build_quadrant_set",
    "classify",
    "classify_items",
    "group_by_quadrant",
    "aggregate",
    "overall_confidence",
    "DOMAIN_PROFILES",
    "DomainProfile",
    "list_domain_profiles",
]
