"""
核心领域模型 - 所有业务实体和值对象的定义

设计原则：
1. 不可变性：使用 frozen=True 确保模型不可变
2. 构造即校验：坐标、置信度、规则在创建时检查
3. 可序列化：to_dict / from_dict 与外部 JSON 表示一一对应
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from quadsight.domain.rules import Rule, compile_rule


COORDINATE_MIN = 0.0
COORDINATE_MAX = 100.0

DEFAULT_QUADRANT_COLOR = "#3b82f6"


# ==================== 枚举类型 ====================

class Domain(str, Enum):
    """分析领域提示"""
    RISK = "risk"                 # 风险分析（概率 × 影响）
    PRIORITY = "priority"         # 优先级矩阵（紧急 × 重要）
    INVESTMENTS = "investments"   # 投资分析（风险 × 回报）
    SPORTS = "sports"             # 体育分析（表现 × 潜力）
    AUTO = "auto"                 # 自动识别


class InsightKind(str, Enum):
    """数据洞察类型"""
    DISTRIBUTION = "distribution"
    CONFIDENCE = "confidence"
    OUTLIERS = "outliers"
    TREND = "trend"
    RECOMMENDATION = "recommendation"


class ErrorCode(str, Enum):
    """错误码"""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    RULE_PARSE_ERROR = "rule_parse_error"
    NOT_FOUND = "not_found"
    ANALYZER_UNAVAILABLE = "analyzer_unavailable"
    ANALYZER_ERROR = "analyzer_error"
    EXTRACTION_ERROR = "extraction_error"
    LLM_ERROR = "llm_error"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal_error"


def _check_range(name: str, value: float, low: float, high: float) -> float:
    value = float(value)
    if math.isnan(value) or not low <= value <= high:
        raise ValueError(f"{name} 必须位于 [{low:g}, {high:g}] 区间，实际为 {value}")
    return value


# ==================== 值对象 ====================

@dataclass(frozen=True)
class Point:
    """矩阵上的坐标点，两个分量都在 [0, 100]"""
    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, "x", _check_range("x", self.x, COORDINATE_MIN, COORDINATE_MAX))
        object.__setattr__(self, "y", _check_range("y", self.y, COORDINATE_MIN, COORDINATE_MAX))


@dataclass(frozen=True)
class Item:
    """被定位的条目"""
    name: str
    x: float
    y: float
    confidence: float
    rationale: str = ""
    citations: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("条目名称不能为空")
        object.__setattr__(self, "x", _check_range("x", self.x, COORDINATE_MIN, COORDINATE_MAX))
        object.__setattr__(self, "y", _check_range("y", self.y, COORDINATE_MIN, COORDINATE_MAX))
        object.__setattr__(self, "confidence", _check_range("confidence", self.confidence, 0.0, 1.0))
        object.__setattr__(self, "citations", tuple(self.citations))

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "confidence": self.confidence,
            "rationale": self.rationale,
            "citations": list(self.citations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(
            name=data["name"],
            x=data["x"],
            y=data["y"],
            confidence=data["confidence"],
            rationale=data.get("rationale", ""),
            citations=tuple(data.get("citations") or ()),
        )


@dataclass(frozen=True)
class Axes:
    """两个坐标维度的语义"""
    x_label: str
    y_label: str
    rationale: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x_label, "y": self.y_label, "rationale": self.rationale}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Axes":
        return cls(
            x_label=data["x"],
            y_label=data["y"],
            rationale=data.get("rationale", ""),
        )


@dataclass(frozen=True)
class ForcedAxes:
    """调用方强制指定的坐标轴名称（两个都指定时才生效）"""
    x: Optional[str] = None
    y: Optional[str] = None

    def __post_init__(self):
        for name in ("x", "y"):
            value = getattr(self, name)
            if value is not None:
                value = value.strip() or None
            object.__setattr__(self, name, value)

    @property
    def is_empty(self) -> bool:
        return self.x is None and self.y is None

    @property
    def is_complete(self) -> bool:
        return self.x is not None and self.y is not None

    def apply(self, axes: Axes) -> Axes:
        """两个轴都指定时才覆盖分析器给出的坐标轴，否则原样返回"""
        if not self.is_complete:
            return axes
        return Axes(
            x_label=self.x,
            y_label=self.y,
            rationale=axes.rationale,
        )


@dataclass(frozen=True)
class Quadrant:
    """
    象限（区域）定义

    规则在构造时编译，规则非法的象限无法被创建（抛出 RuleParseError）。
    """
    id: str
    name: str
    rule: str
    description: str = ""
    implication: str = ""
    color: str = DEFAULT_QUADRANT_COLOR
    compiled: Rule = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("象限 id 不能为空")
        object.__setattr__(self, "compiled", compile_rule(self.rule))

    def contains(self, point: Point) -> bool:
        """判断点是否落在本象限内"""
        return self.compiled.evaluate(point.x, point.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "implication": self.implication,
            "rule": self.rule,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quadrant":
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            rule=data["rule"],
            description=data.get("description", ""),
            implication=data.get("implication", ""),
            color=data.get("color") or DEFAULT_QUADRANT_COLOR,
        )


@dataclass(frozen=True)
class GeneratedInsight:
    """由聚合统计自动生成的洞察"""
    kind: InsightKind
    title: str
    description: str
    related_items: Tuple[Item, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "related_items", tuple(self.related_items))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "description": self.description,
            "related_items": [item.to_dict() for item in self.related_items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratedInsight":
        return cls(
            kind=InsightKind(data["kind"]),
            title=data["title"],
            description=data["description"],
            related_items=tuple(Item.from_dict(i) for i in data.get("related_items", [])),
        )


@dataclass(frozen=True)
class AnalysisMetadata:
    """分析元数据：处理耗时（秒）、整体置信度及附加字段"""
    processing_time: float
    confidence: float
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.processing_time < 0:
            raise ValueError("processing_time 不能为负数")
        object.__setattr__(self, "confidence", _check_range("confidence", self.confidence, 0.0, 1.0))
        object.__setattr__(self, "extra", dict(self.extra))

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["processing_time"] = self.processing_time
        data["confidence"] = self.confidence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisMetadata":
        extra = dict(data)
        processing_time = extra.pop("processing_time")
        confidence = extra.pop("confidence")
        return cls(processing_time=processing_time, confidence=confidence, extra=extra)


# ==================== 分析结果 ====================

@dataclass(frozen=True)
class AnalysisResult:
    """一次分析的完整结果（创建后不可变）"""
    axes: Axes
    items: Tuple[Item, ...]
    quadrants: Tuple[Quadrant, ...]
    insights: Tuple[str, ...]
    metadata: AnalysisMetadata
    data_insights: Tuple[GeneratedInsight, ...] = ()

    def __post_init__(self):
        for name in ("items", "quadrants", "insights", "data_insights"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def with_metadata(self, **extra: Any) -> "AnalysisResult":
        """返回合并了附加元数据的新结果"""
        merged = dict(self.metadata.extra)
        merged.update(extra)
        return replace(self, metadata=replace(self.metadata, extra=merged))

    def with_insights_prefix(self, *notes: str) -> "AnalysisResult":
        """返回在洞察列表前插入说明的新结果"""
        return replace(self, insights=tuple(notes) + self.insights)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（外部 JSON 表示）"""
        return {
            "axes": self.axes.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "quadrants": [q.to_dict() for q in self.quadrants],
            "insights": list(self.insights),
            "metadata": self.metadata.to_dict(),
            "data_insights": [i.to_dict() for i in self.data_insights],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """从外部 JSON 表示解析"""
        return cls(
            axes=Axes.from_dict(data["axes"]),
            items=tuple(Item.from_dict(i) for i in data.get("items", [])),
            quadrants=tuple(Quadrant.from_dict(q) for q in data.get("quadrants", [])),
            insights=tuple(data.get("insights", [])),
            metadata=AnalysisMetadata.from_dict(data["metadata"]),
            data_insights=tuple(
                GeneratedInsight.from_dict(i) for i in data.get("data_insights", [])
            ),
        )


@dataclass(frozen=True)
class AnalyzerOutput:
    """内容分析器的输出（已校验）"""
    axes: Axes
    items: Tuple[Item, ...]
    insights: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "insights", tuple(self.insights))


def items_from_dicts(rows: Sequence[Dict[str, Any]]) -> Tuple[Item, ...]:
    """批量构造条目"""
    return tuple(Item.from_dict(row) for row in rows)
