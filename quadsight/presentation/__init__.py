"""
表现层 - 报告生成与导出

负责将结构化的分析结果转换为用户可读或可下载的格式。

包含：
- ReportWriter / ReportFormat: Markdown、HTML、纯文本报告
- to_json / items_to_csv: 数据导出
- chart_points: 散点图数据（按象限规则着色）
- query_items: 条目表的搜索、过滤与排序
"""

from quadsight.presentation.report_writer import (
    ReportWriter,
    ReportFormat,
    ReportSection,
    create_report_writer,
)
from quadsight.presentation.exporters import (
    ItemRow,
    SortField,
    chart_points,
    items_to_csv,
    query_items,
    to_json,
)

__all__ = [
    "ReportWriter",
    "ReportFormat",
    "ReportSection",
    "create_report_writer",
    "ItemRow",
    "SortField",
    "chart_points",
    "items_to_csv",
    "query_items",
    "to_json",
]
