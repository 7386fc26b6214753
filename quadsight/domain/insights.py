"""
洞察聚合器 - 基于阈值/均值启发式的数据洞察

每条启发式独立判断，满足触发条件即追加（互不排斥）：
- 分布：条目最多的象限占比 > 40%
- 高置信：置信度 > 0.8 的条目占比 > 70%
- 低置信：置信度 < 0.6 的条目占比 > 30%
- 离群：x 或 y 落在 [10, 90] 之外
- 轴向趋势：x 均值 > 60 / y 均值 > 60（可同时触发）
- 建议：x > 70 且 y > 70 的优先关注条目

条目为空时不生成任何洞察，整体置信度为 0。
"""

from typing import List, Sequence

from quadsight.domain.models import Axes, GeneratedInsight, InsightKind, Item, Quadrant
from quadsight.domain.quadrants import group_by_quadrant


CLUSTER_SHARE_PERCENT = 40
HIGH_CONFIDENCE = 0.8
HIGH_CONFIDENCE_SHARE_PERCENT = 70
LOW_CONFIDENCE = 0.6
LOW_CONFIDENCE_SHARE_PERCENT = 30
OUTLIER_LOW = 10
OUTLIER_HIGH = 90
TREND_MEAN = 60
PRIORITY_FOCUS = 70


def overall_confidence(items: Sequence[Item]) -> float:
    """条目置信度的算术平均；无条目时为 0"""
    if not items:
        return 0.0
    return sum(item.confidence for item in items) / len(items)


def _share_exceeds(count: int, total: int, percent: int) -> bool:
    """count / total 严格大于 percent%（整数比较，避免浮点误差）"""
    return count * 100 > total * percent


def is_outlier(item: Item) -> bool:
    return not (OUTLIER_LOW <= item.x <= OUTLIER_HIGH and OUTLIER_LOW <= item.y <= OUTLIER_HIGH)


def _distribution_insight(
    items: Sequence[Item],
    quadrants: Sequence[Quadrant],
) -> List[GeneratedInsight]:
    if not quadrants:
        return []

    groups, _ = group_by_quadrant(items, quadrants)

    # 并列时取列表中靠前的象限
    top = quadrants[0]
    for quadrant in quadrants[1:]:
        if len(groups[quadrant.id]) > len(groups[top.id]):
            top = quadrant

    members = groups[top.id]
    if not _share_exceeds(len(members), len(items), CLUSTER_SHARE_PERCENT):
        return []

    share = len(members) / len(items) * 100
    return [GeneratedInsight(
        kind=InsightKind.DISTRIBUTION,
        title="Clustering Detected",
        description=(
            f"{share:.0f}% of items are concentrated in the \"{top.name}\" quadrant, "
            f"suggesting a clear pattern in your data."
        ),
        related_items=members,
    )]


def _confidence_insights(items: Sequence[Item]) -> List[GeneratedInsight]:
    insights = []
    high = [item for item in items if item.confidence > HIGH_CONFIDENCE]
    low = [item for item in items if item.confidence < LOW_CONFIDENCE]

    if _share_exceeds(len(high), len(items), HIGH_CONFIDENCE_SHARE_PERCENT):
        insights.append(GeneratedInsight(
            kind=InsightKind.CONFIDENCE,
            title="High Analysis Confidence",
            description=(
                f"{len(high)} out of {len(items)} items have high confidence scores (>80%), "
                f"indicating reliable positioning."
            ),
            related_items=high,
        ))

    if _share_exceeds(len(low), len(items), LOW_CONFIDENCE_SHARE_PERCENT):
        insights.append(GeneratedInsight(
            kind=InsightKind.CONFIDENCE,
            title="Some Uncertain Positions",
            description=(
                f"{len(low)} items have lower confidence scores, which may require "
                f"additional context or data for better positioning."
            ),
            related_items=low,
        ))

    return insights


def _outlier_insight(items: Sequence[Item]) -> List[GeneratedInsight]:
    outliers = [item for item in items if is_outlier(item)]
    if not outliers:
        return []
    return [GeneratedInsight(
        kind=InsightKind.OUTLIERS,
        title="Extreme Positions Identified",
        description=(
            f"{len(outliers)} items are positioned at extreme values, representing either "
            f"exceptional cases or edge scenarios worth special attention."
        ),
        related_items=outliers,
    )]


def _trend_insights(items: Sequence[Item], axes: Axes) -> List[GeneratedInsight]:
    insights = []
    x_mean = sum(item.x for item in items) / len(items)
    y_mean = sum(item.y for item in items) / len(items)

    if x_mean > TREND_MEAN:
        insights.append(GeneratedInsight(
            kind=InsightKind.TREND,
            title=f"High {axes.x_label} Tendency",
            description=(
                f"Most items show high {axes.x_label.lower()} values (average: {x_mean:.1f}), "
                f"indicating a general trend toward this characteristic."
            ),
        ))

    if y_mean > TREND_MEAN:
        insights.append(GeneratedInsight(
            kind=InsightKind.TREND,
            title=f"High {axes.y_label} Pattern",
            description=(
                f"The majority of items demonstrate high {axes.y_label.lower()} "
                f"(average: {y_mean:.1f}), suggesting this is a dominant theme."
            ),
        ))

    return insights


def _recommendation_insight(items: Sequence[Item], axes: Axes) -> List[GeneratedInsight]:
    focus = [item for item in items if item.x > PRIORITY_FOCUS and item.y > PRIORITY_FOCUS]
    if not focus:
        return []
    return [GeneratedInsight(
        kind=InsightKind.RECOMMENDATION,
        title="Priority Focus Areas",
        description=(
            f"{len(focus)} items in the high-{axes.x_label}/high-{axes.y_label} area represent "
            f"your highest priority opportunities requiring immediate attention."
        ),
        related_items=focus,
    )]


def aggregate(
    items: Sequence[Item],
    quadrants: Sequence[Quadrant],
    axes: Axes,
) -> List[GeneratedInsight]:
    """
    计算数据洞察

    Args:
        items: 已定位的条目
        quadrants: 有序象限集合
        axes: 坐标轴（用于生成文案）

    Returns:
        按固定顺序排列的洞察：分布、置信度、离群、趋势、建议
    """
    if not items:
        return []

    insights: List[GeneratedInsight] = []
    insights.extend(_distribution_insight(items, quadrants))
    insights.extend(_confidence_insights(items))
    insights.extend(_outlier_insight(items))
    insights.extend(_trend_insights(items, axes))
    insights.extend(_recommendation_insight(items, axes))
    return insights
