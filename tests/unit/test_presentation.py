"""
导出工具与报告生成器测试
"""

import csv
import io
import json

import pytest

from quadsight.domain.insights import aggregate
from quadsight.domain.models import AnalysisMetadata, AnalysisResult, Axes, Item, Quadrant
from quadsight.presentation import (
    ReportFormat,
    ReportWriter,
    SortField,
    chart_points,
    create_report_writer,
    items_to_csv,
    query_items,
    to_json,
)
from quadsight.presentation.report_writer import AxesSection


@pytest.fixture
def custom_result(mock_axes, mock_items):
    """使用自定义象限（不覆盖整个平面）的分析结果"""
    quadrants = (
        Quadrant(id="critical", name="Critical", rule="x >= 75 && y >= 75", color="#dc2626"),
        Quadrant(id="watch", name="Watch", rule="y >= 90 || x > 60 && y > 30", color="#eab308"),
    )
    return AnalysisResult(
        axes=mock_axes,
        items=mock_items,
        quadrants=quadrants,
        insights=(),
        metadata=AnalysisMetadata(processing_time=0.5, confidence=0.76),
    )


class TestJsonAndCsv:
    """JSON / CSV 导出测试"""

    def test_to_json(self, mock_result):
        """测试 JSON 导出与 to_dict 一致"""
        assert json.loads(to_json(mock_result)) == json.loads(json.dumps(mock_result.to_dict()))

    def test_csv_rows(self, mock_result):
        """测试 CSV 行与象限列"""
        rows = list(csv.reader(io.StringIO(items_to_csv(mock_result))))
        assert rows[0] == ["name", "x", "y", "confidence", "quadrant", "rationale", "citations"]
        assert rows[1] == [
            "Vendor outage", "80", "90", "0.9", "Q1",
            "Single supplier with frequent incidents",
            "the vendor failed twice last quarter",
        ]
        assert [r[4] for r in rows[1:]] == ["Q1", "Q2", "Q3", "Q4"]

    def test_csv_quoting_and_unclassified(self, mock_axes):
        """测试含逗号的字段与未分类条目"""
        result = AnalysisResult(
            axes=mock_axes,
            items=(Item(name="Supply, logistics", x=10, y=10, confidence=0.5, citations=("a", "b")),),
            quadrants=(Quadrant(id="top", name="Top", rule="y > 50"),),
            insights=(),
            metadata=AnalysisMetadata(processing_time=0, confidence=0.5),
        )
        rows = list(csv.reader(io.StringIO(items_to_csv(result))))
        assert rows[1][0] == "Supply, logistics"
        assert rows[1][4] == ""
        assert rows[1][6] == "a | b"


class TestChartPoints:
    """散点图数据测试"""

    def test_colors_follow_default_rules(self, mock_result):
        """测试默认象限颜色"""
        points = chart_points(mock_result)
        assert [p["quadrant_id"] for p in points] == ["Q1", "Q2", "Q3", "Q4"]
        assert [p["color"] for p in points] == ["#ef4444", "#f97316", "#22c55e", "#3b82f6"]
        assert points[0]["size"] == pytest.approx(12 + 0.9 * 8)

    def test_colors_follow_custom_rules(self, custom_result):
        """测试自定义象限按规则着色而非 50/50 中线"""
        points = {p["name"]: p for p in chart_points(custom_result)}
        assert points["Vendor outage"]["color"] == "#dc2626"
        assert points["Data breach"]["color"] == "#eab308"
        assert points["Staff turnover"]["quadrant_id"] == "watch"
        assert points["Office move"]["quadrant_id"] is None
        assert points["Office move"]["color"] == "#3b82f6"


class TestQueryItems:
    """表格查询测试"""

    def test_default_sort_by_confidence_desc(self, mock_result):
        """测试默认按置信度倒序"""
        rows = query_items(mock_result)
        assert [r.item.name for r in rows] == [
            "Vendor outage", "Data breach", "Office move", "Staff turnover",
        ]

    def test_sort_by_name_asc(self, mock_result):
        """测试按名称升序"""
        rows = query_items(mock_result, sort_field="name", descending=False)
        assert [r.item.name for r in rows] == [
            "Data breach", "Office move", "Staff turnover", "Vendor outage",
        ]

    def test_sort_by_x(self, mock_result):
        """测试按 X 升序"""
        rows = query_items(mock_result, sort_field=SortField.X.value, descending=False)
        assert [r.item.x for r in rows] == [20, 30, 65, 80]

    def test_search_matches_citations(self, mock_result):
        """测试搜索覆盖引用且不区分大小写"""
        rows = query_items(mock_result, search="CUSTOMER")
        assert [r.item.name for r in rows] == ["Data breach"]

    def test_filter_by_quadrant(self, mock_result):
        """测试按象限过滤"""
        rows = query_items(mock_result, quadrant_id="Q4")
        assert [r.item.name for r in rows] == ["Staff turnover"]
        assert rows[0].to_dict()["quadrant"]["id"] == "Q4"

    def test_unclassified_row(self, custom_result):
        """测试未分类条目的行"""
        rows = query_items(custom_result, search="office")
        assert rows[0].quadrant is None
        assert rows[0].to_dict()["quadrant"] is None

    def test_invalid_sort_field(self, mock_result):
        """测试非法排序字段"""
        with pytest.raises(ValueError):
            query_items(mock_result, sort_field="rationale")


class TestReportWriter:
    """报告生成器测试"""

    @pytest.fixture
    def writer(self):
        return create_report_writer()

    @pytest.fixture
    def full_result(self, mock_result):
        return AnalysisResult(
            axes=mock_result.axes,
            items=mock_result.items,
            quadrants=mock_result.quadrants,
            insights=mock_result.insights,
            metadata=mock_result.metadata,
            data_insights=aggregate(mock_result.items, mock_result.quadrants, mock_result.axes),
        )

    def test_markdown(self, writer, full_result):
        """测试 Markdown 报告"""
        report = writer.generate(full_result, ReportFormat.MARKDOWN)

        assert report.startswith("# Probability vs Impact\n")
        assert "## Axes" in report
        assert "## Quadrants" in report
        assert "| High Probability / High Impact | `x >= 50 && y >= 50` | 1 |" in report
        assert "| Vendor outage | 80 | 90 | 90% | High Probability / High Impact |" in report
        assert "## Insights\n\n- Mitigate the vendor dependency first" in report
        assert "## Data Insights" in report
        assert "### Priority Focus Areas" in report
        assert "*Related: Vendor outage*" in report
        assert report.rstrip().endswith("*Confidence: 76% | Processing time: 1.25s*")

    def test_pipes_escaped_in_rules(self, writer, custom_result):
        """测试规则中的 || 不破坏表格"""
        report = writer.generate(custom_result)
        assert "`y >= 90 \\|\\| x > 60 && y > 30`" in report
        assert "*Unclassified items: 1*" in report
        assert "| Office move | 30 | 20 | 70% | - |" in report

    def test_html(self, writer, custom_result):
        """测试 HTML 报告"""
        report = writer.generate(custom_result, ReportFormat.HTML)

        assert report.startswith("<div class='report'>")
        assert report.endswith("</div>")
        assert "<h1>Probability vs Impact</h1>" in report
        assert "<th>Quadrant</th>" in report
        assert "<td><code>y &gt;= 90 || x &gt; 60 &amp;&amp; y &gt; 30</code></td>" in report
        assert "<li><strong>X</strong>: Probability</li>" in report
        assert "<hr>" in report

    def test_html_escapes_content(self, writer, mock_axes):
        """测试条目名称被转义"""
        result = AnalysisResult(
            axes=mock_axes,
            items=(Item(name="<script>alert(1)</script>", x=60, y=60, confidence=0.5),),
            quadrants=(),
            insights=(),
            metadata=AnalysisMetadata(processing_time=0, confidence=0.5),
        )
        report = writer.generate(result, ReportFormat.HTML)
        assert "<script>" not in report
        assert "&lt;script&gt;" in report

    def test_text(self, writer, custom_result):
        """测试纯文本报告"""
        report = writer.generate(custom_result, ReportFormat.TEXT)
        assert report.startswith("Probability vs Impact\n")
        assert "**" not in report
        assert "|------" not in report
        assert "Vendor outage  80  90  90%  Critical" in report

    def test_empty_items(self, writer):
        """测试无条目"""
        result = AnalysisResult(
            axes=Axes("A", "B"),
            items=(),
            quadrants=(),
            insights=(),
            metadata=AnalysisMetadata(processing_time=0, confidence=0),
        )
        assert "No items" in writer.generate(result)

    def test_custom_sections(self, mock_result):
        """测试自定义章节"""
        report = ReportWriter(sections=[AxesSection()]).generate(mock_result)
        assert "## Axes" in report
        assert "## Items" not in report
