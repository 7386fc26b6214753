"""
导出工具 - JSON / CSV / 图表数据 / 表格查询

图表着色一律通过 classify 取得象限，不做写死的 50/50 判断，
自定义象限集合也能正确着色。
"""

import csv
import io
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from quadsight.domain.models import DEFAULT_QUADRANT_COLOR, AnalysisResult, Item, Quadrant
from quadsight.domain.quadrants import classify, classify_items


CSV_COLUMNS = ("name", "x", "y", "confidence", "quadrant", "rationale", "citations")

MARKER_BASE_SIZE = 12
MARKER_CONFIDENCE_SCALE = 8


class SortField(str, Enum):
    """表格排序字段"""
    NAME = "name"
    X = "x"
    Y = "y"
    CONFIDENCE = "confidence"
    QUADRANT = "quadrant"


def to_json(result: AnalysisResult, indent: Optional[int] = 2) -> str:
    """完整结果的 JSON 表示"""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=indent)


def items_to_csv(result: AnalysisResult) -> str:
    """
    条目导出为 CSV

    每行附带所在象限 id（未分类为空），引用以 " | " 连接。
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for item, quadrant in classify_items(result.items, result.quadrants):
        writer.writerow([
            item.name,
            f"{item.x:g}",
            f"{item.y:g}",
            f"{item.confidence:g}",
            quadrant.id if quadrant else "",
            item.rationale,
            " | ".join(item.citations),
        ])
    return buffer.getvalue()


def chart_points(result: AnalysisResult) -> List[Dict[str, Any]]:
    """散点图数据：坐标、标记大小与象限颜色"""
    points = []
    for item in result.items:
        quadrant = classify(item.point, result.quadrants)
        points.append({
            "name": item.name,
            "x": item.x,
            "y": item.y,
            "confidence": item.confidence,
            "size": MARKER_BASE_SIZE + item.confidence * MARKER_CONFIDENCE_SCALE,
            "color": quadrant.color if quadrant else DEFAULT_QUADRANT_COLOR,
            "quadrant_id": quadrant.id if quadrant else None,
        })
    return points


@dataclass(frozen=True)
class ItemRow:
    """表格行：条目及其所在象限"""
    item: Item
    quadrant: Optional[Quadrant]

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict()
        data["quadrant"] = self.quadrant.to_dict() if self.quadrant else None
        return data


def _matches(item: Item, needle: str) -> bool:
    return (
        needle in item.name.lower()
        or needle in item.rationale.lower()
        or any(needle in c.lower() for c in item.citations)
    )


def _sort_key(row: ItemRow, field: SortField) -> Tuple:
    if field == SortField.NAME:
        return (row.item.name.lower(),)
    if field == SortField.QUADRANT:
        return (row.quadrant.name if row.quadrant else "",)
    return (getattr(row.item, field.value),)


def query_items(
    result: AnalysisResult,
    search: Optional[str] = None,
    quadrant_id: Optional[str] = None,
    sort_field: str = SortField.CONFIDENCE.value,
    descending: bool = True,
) -> List[ItemRow]:
    """
    表格查询：搜索、按象限过滤、排序

    Args:
        result: 分析结果
        search: 搜索词，不区分大小写匹配名称、理由与引用
        quadrant_id: 只保留该象限的条目（None 表示全部）
        sort_field: name / x / y / confidence / quadrant
        descending: 是否倒序

    Raises:
        ValueError: 排序字段非法
    """
    field = SortField(sort_field)
    rows = [ItemRow(item, q) for item, q in classify_items(result.items, result.quadrants)]

    if search:
        needle = search.lower()
        rows = [r for r in rows if _matches(r.item, needle)]

    if quadrant_id is not None:
        rows = [r for r in rows if r.quadrant is not None and r.quadrant.id == quadrant_id]

    # sorted 是稳定排序，相等键保持原有顺序
    return sorted(rows, key=lambda r: _sort_key(r, field), reverse=descending)
