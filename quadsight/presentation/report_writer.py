"""
报告生成器 - 将分析结果转换为用户可读的报告

设计原则：
1. 模板驱动：报告由若干章节模板依次渲染
2. 多格式支持：Markdown、HTML、纯文本
3. 分类一致：象限计数与条目表都经由 classify 计算
"""

import html
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence

from quadsight.domain.models import AnalysisResult
from quadsight.domain.quadrants import classify_items, group_by_quadrant


class ReportFormat(str, Enum):
    """报告格式"""
    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


def _cell(value: str) -> str:
    """转义表格单元格中的竖线"""
    return value.replace("|", "\\|")


def _split_row(line: str) -> List[str]:
    cells = re.split(r"(?<!\\)\|", line.strip().strip("|"))
    return [c.strip().replace("\\|", "|") for c in cells]


class ReportSection(ABC):
    """报告章节基类"""

    @abstractmethod
    def render(self, result: AnalysisResult) -> str:
        """渲染为 Markdown"""
        pass


class AxesSection(ReportSection):
    """坐标轴"""

    def render(self, result: AnalysisResult) -> str:
        axes = result.axes
        report = "## Axes\n\n"
        report += f"- **X**: {axes.x_label}\n"
        report += f"- **Y**: {axes.y_label}\n"
        if axes.rationale:
            report += f"\n{axes.rationale}\n"
        return report


class QuadrantLegendSection(ReportSection):
    """象限图例，附每个象限的条目数"""

    def render(self, result: AnalysisResult) -> str:
        groups, unclassified = group_by_quadrant(result.items, result.quadrants)

        report = "## Quadrants\n\n"
        report += "| Quadrant | Rule | Items | Implication |\n"
        report += "|------|------|------|------|\n"
        for quadrant in result.quadrants:
            report += (
                f"| {_cell(quadrant.name)} | `{_cell(quadrant.rule)}` | "
                f"{len(groups[quadrant.id])} | {_cell(quadrant.implication)} |\n"
            )
        if unclassified:
            report += f"\n*Unclassified items: {len(unclassified)}*\n"
        return report


class ItemTableSection(ReportSection):
    """条目表"""

    def render(self, result: AnalysisResult) -> str:
        if not result.items:
            return "## Items\n\nNo items"

        axes = result.axes
        report = "## Items\n\n"
        report += f"| Name | {_cell(axes.x_label)} | {_cell(axes.y_label)} | Confidence | Quadrant |\n"
        report += "|------|------|------|------|------|\n"
        for item, quadrant in classify_items(result.items, result.quadrants):
            report += (
                f"| {_cell(item.name)} | {item.x:g} | {item.y:g} | "
                f"{item.confidence * 100:.0f}% | {_cell(quadrant.name) if quadrant else '-'} |\n"
            )
        return report


class AnalystInsightsSection(ReportSection):
    """分析器给出的洞察"""

    def render(self, result: AnalysisResult) -> str:
        if not result.insights:
            return ""
        report = "## Insights\n\n"
        for insight in result.insights:
            report += f"- {insight}\n"
        return report


class DataInsightsSection(ReportSection):
    """聚合器生成的数据洞察"""

    def render(self, result: AnalysisResult) -> str:
        if not result.data_insights:
            return ""
        report = "## Data Insights\n\n"
        for insight in result.data_insights:
            report += f"### {insight.title}\n\n{insight.description}\n"
            if insight.related_items:
                names = ", ".join(i.name for i in insight.related_items)
                report += f"\n*Related: {names}*\n"
            report += "\n"
        return report


DEFAULT_SECTIONS: Sequence[ReportSection] = (
    AxesSection(),
    QuadrantLegendSection(),
    ItemTableSection(),
    AnalystInsightsSection(),
    DataInsightsSection(),
)


class ReportWriter:
    """
    报告生成器

    职责：
    1. 按章节顺序渲染 Markdown 报告
    2. 转换为 HTML 或纯文本
    """

    def __init__(self, sections: Optional[Sequence[ReportSection]] = None):
        """
        初始化报告生成器

        Args:
            sections: 章节列表（默认：坐标轴、象限图例、条目表、洞察、数据洞察）
        """
        self._sections: List[ReportSection] = list(sections or DEFAULT_SECTIONS)

    def generate(
        self,
        result: AnalysisResult,
        format: ReportFormat = ReportFormat.MARKDOWN
    ) -> str:
        """
        生成报告

        Args:
            result: 分析结果
            format: 报告格式

        Returns:
            str: 生成的报告
        """
        markdown_report = self._render_markdown(result)

        if format == ReportFormat.HTML:
            return self._markdown_to_html(markdown_report)
        if format == ReportFormat.TEXT:
            return self._markdown_to_text(markdown_report)
        return markdown_report

    def _render_markdown(self, result: AnalysisResult) -> str:
        axes = result.axes
        report = f"# {axes.x_label} vs {axes.y_label}\n\n"

        parts = [section.render(result) for section in self._sections]
        report += "\n".join(p.rstrip() + "\n" for p in parts if p)

        metadata = result.metadata
        report += (
            f"\n---\n*Confidence: {metadata.confidence * 100:.0f}% | "
            f"Processing time: {metadata.processing_time:.2f}s*\n"
        )
        return report

    def _markdown_to_html(self, markdown: str) -> str:
        """将 Markdown 转换为 HTML（仅覆盖本报告用到的语法）"""
        lines: List[str] = []
        in_list = False
        in_table = False

        for raw in markdown.splitlines():
            line = html.escape(raw, quote=False)
            line = re.sub(r'\*\*(.+?)\*\*', r'<strong>\1</strong>', line)
            line = re.sub(r'\*(.+?)\*', r'<em>\1</em>', line)
            line = re.sub(r'`(.+?)`', r'<code>\1</code>', line)

            if in_list and not line.startswith("- "):
                lines.append("</ul>")
                in_list = False
            if in_table and not line.startswith("|"):
                lines.append("</table>")
                in_table = False

            heading = re.match(r'^(#{1,3}) (.*)$', line)
            if heading:
                level = len(heading.group(1))
                lines.append(f"<h{level}>{heading.group(2)}</h{level}>")
            elif line.startswith("- "):
                if not in_list:
                    lines.append("<ul>")
                    in_list = True
                lines.append(f"<li>{line[2:]}</li>")
            elif line.startswith("|"):
                cells = _split_row(line)
                if all(re.fullmatch(r'-+', c) for c in cells):
                    continue
                tag = "th" if not in_table else "td"
                if not in_table:
                    lines.append("<table>")
                    in_table = True
                lines.append("<tr>" + "".join(f"<{tag}>{c}</{tag}>" for c in cells) + "</tr>")
            elif line == "---":
                lines.append("<hr>")
            elif line:
                lines.append(f"<p>{line}</p>")

        if in_list:
            lines.append("</ul>")
        if in_table:
            lines.append("</table>")
        return "<div class='report'>\n" + "\n".join(lines) + "\n</div>"

    def _markdown_to_text(self, markdown: str) -> str:
        """将 Markdown 转换为纯文本"""
        text = markdown
        text = re.sub(r'\*\*(.+?)\*\*', r'\1', text)
        text = re.sub(r'\*(.+?)\*', r'\1', text)
        text = re.sub(r'`(.+?)`', r'\1', text)
        text = re.sub(r'#{1,6}\s+', '', text)
        text = re.sub(r'^\|[-|]+\|$\n?', '', text, flags=re.MULTILINE)
        text = re.sub(r'^\| (.+) \|$', lambda m: "  ".join(_split_row(m.group(0))), text, flags=re.MULTILINE)
        return text


# 便捷函数
def create_report_writer() -> ReportWriter:
    """创建报告生成器实例"""
    return ReportWriter()
