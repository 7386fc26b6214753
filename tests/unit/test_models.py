"""
Domain 模型测试
"""

import json
import math

import pytest

from quadsight.domain.models import (
    DEFAULT_QUADRANT_COLOR,
    AnalysisMetadata,
    AnalysisResult,
    Axes,
    Domain,
    ErrorCode,
    ForcedAxes,
    GeneratedInsight,
    InsightKind,
    Item,
    Point,
    Quadrant,
    items_from_dicts,
)
from quadsight.domain.insights import aggregate
from quadsight.domain.rules import RuleParseError


class TestEnums:
    """枚举测试"""

    def test_domain_enum(self):
        """测试领域枚举"""
        assert [d.value for d in Domain] == ["risk", "priority", "investments", "sports", "auto"]

    def test_insight_kind_enum(self):
        """测试洞察类型枚举"""
        assert InsightKind.DISTRIBUTION.value == "distribution"
        assert InsightKind.RECOMMENDATION.value == "recommendation"

    def test_error_code_enum(self):
        """测试错误码枚举"""
        assert ErrorCode.INVALID_INPUT.value == "invalid_input"
        assert ErrorCode.RULE_PARSE_ERROR.value == "rule_parse_error"
        assert ErrorCode.NOT_FOUND.value == "not_found"


class TestPointAndItem:
    """Point / Item 测试"""

    def test_point_bounds(self):
        """测试坐标区间"""
        assert Point(0, 100) == Point(0.0, 100.0)
        with pytest.raises(ValueError):
            Point(-0.1, 50)
        with pytest.raises(ValueError):
            Point(50, 100.5)
        with pytest.raises(ValueError):
            Point(math.nan, 50)

    def test_item_validation(self):
        """测试条目校验"""
        with pytest.raises(ValueError):
            Item(name="a", x=50, y=50, confidence=1.5)
        with pytest.raises(ValueError):
            Item(name="  ", x=50, y=50, confidence=0.5)
        with pytest.raises(ValueError):
            Item(name="a", x=101, y=50, confidence=0.5)

    def test_item_citations_tuple(self):
        """测试引用转为元组"""
        item = Item(name="a", x=1, y=2, confidence=0.5, citations=["one", "two"])
        assert item.citations == ("one", "two")
        assert item.point == Point(1, 2)

    def test_item_immutable(self):
        """测试不可变"""
        item = Item(name="a", x=1, y=2, confidence=0.5)
        with pytest.raises(AttributeError):
            item.x = 3

    def test_items_from_dicts(self):
        """测试批量构造"""
        items = items_from_dicts([
            {"name": "a", "x": 10, "y": 20, "confidence": 0.5},
            {"name": "b", "x": 30, "y": 40, "confidence": 0.6, "citations": None},
        ])
        assert [i.name for i in items] == ["a", "b"]
        assert items[1].citations == ()


class TestForcedAxes:
    """强制坐标轴测试"""

    def test_apply_both(self):
        """测试同时覆盖两个轴"""
        axes = ForcedAxes(x="Cost", y="Benefit").apply(Axes("A", "B", "why"))
        assert axes == Axes("Cost", "Benefit", "why")

    def test_apply_one_keeps_analyzer_axes(self):
        """测试只指定一个轴时不改写分析器的坐标轴"""
        original = Axes("Risk", "Impact", "why")
        forced = ForcedAxes(x="Cost")
        assert not forced.is_complete
        assert forced.apply(original) == original
        assert ForcedAxes(y="Benefit").apply(original) == original

    def test_blank_is_empty(self):
        """测试空白名称视为未指定"""
        forced = ForcedAxes(x="  ", y=None)
        assert forced.x is None
        assert forced.is_empty


class TestQuadrant:
    """象限测试"""

    def test_rule_compiled_at_construction(self):
        """测试构造时编译规则"""
        quadrant = Quadrant(id="q", name="Q", rule="x > 50")
        assert quadrant.contains(Point(60, 0))
        assert not quadrant.contains(Point(40, 0))

    def test_invalid_rule_rejected(self):
        """测试非法规则无法创建象限"""
        with pytest.raises(RuleParseError):
            Quadrant(id="q", name="Q", rule="x > 50 && alert(1)")

    def test_from_dict_defaults(self):
        """测试默认名称与颜色"""
        quadrant = Quadrant.from_dict({"id": "q", "rule": "x > 1"})
        assert quadrant.name == "q"
        assert quadrant.color == DEFAULT_QUADRANT_COLOR


class TestAnalysisResult:
    """分析结果测试"""

    def test_round_trip(self, mock_result):
        """测试序列化后再解析得到相同结果"""
        result = AnalysisResult(
            axes=mock_result.axes,
            items=mock_result.items,
            quadrants=mock_result.quadrants,
            insights=mock_result.insights,
            metadata=mock_result.metadata,
            data_insights=aggregate(mock_result.items, mock_result.quadrants, mock_result.axes),
        )
        wire = json.loads(json.dumps(result.to_dict()))
        parsed = AnalysisResult.from_dict(wire)

        assert parsed == result
        assert [i.name for i in parsed.items] == [i.name for i in result.items]
        assert [q.id for q in parsed.quadrants] == ["Q1", "Q2", "Q3", "Q4"]
        assert parsed.metadata.extra == {"domain": "risk", "using_mock_data": False}

    def test_wire_shape(self, mock_result):
        """测试外部表示字段"""
        data = mock_result.to_dict()
        assert data["axes"] == {
            "x": "Probability",
            "y": "Impact",
            "rationale": "Separates the risks",
        }
        assert data["metadata"]["processing_time"] == 1.25
        assert data["metadata"]["domain"] == "risk"
        assert data["items"][0]["citations"] == ["the vendor failed twice last quarter"]
        assert data["data_insights"] == []

    def test_with_metadata(self, mock_result):
        """测试追加元数据返回新对象"""
        updated = mock_result.with_metadata(analysis_id="abc")
        assert updated.metadata.extra["analysis_id"] == "abc"
        assert "analysis_id" not in mock_result.metadata.extra
        assert updated.metadata.processing_time == mock_result.metadata.processing_time

    def test_with_insights_prefix(self, mock_result):
        """测试在洞察前插入说明"""
        updated = mock_result.with_insights_prefix("note")
        assert updated.insights == ("note", "Mitigate the vendor dependency first")

    def test_metadata_validation(self):
        """测试元数据校验"""
        with pytest.raises(ValueError):
            AnalysisMetadata(processing_time=-1, confidence=0.5)
        with pytest.raises(ValueError):
            AnalysisMetadata(processing_time=1, confidence=2)

    def test_generated_insight_round_trip(self):
        """测试洞察序列化"""
        insight = GeneratedInsight(
            kind=InsightKind.OUTLIERS,
            title="t",
            description="d",
            related_items=[Item(name="a", x=95, y=50, confidence=0.5)],
        )
        assert GeneratedInsight.from_dict(insight.to_dict()) == insight
