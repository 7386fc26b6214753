"""
象限分类器与象限集合构建

- classify: 按列表顺序返回第一个规则命中的象限，全部未命中返回 None
- build_default_quadrants: 以 50 为中线生成标准 2x2 划分
- build_quadrant_set: 接受调用方自定义的象限集合并做构造期校验
"""

from collections import OrderedDict
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from quadsight.domain.models import Item, Point, Quadrant
from quadsight.domain.rules import RuleParseError


MIDLINE = 50

QuadrantLike = Union[Quadrant, Mapping[str, Any]]


class QuadrantSetError(ValueError):
    """象限集合非法（规则无法编译、id 重复或集合为空）"""

    def __init__(self, message: str, quadrant_id: Optional[str] = None):
        self.message = message
        self.quadrant_id = quadrant_id
        super().__init__(message)


# ==================== 分类 ====================

def classify(point: Point, quadrants: Sequence[Quadrant]) -> Optional[Quadrant]:
    """
    对点进行象限分类

    列表顺序即优先级：返回第一个规则为真的象限。

    Returns:
        命中的象限；没有任何规则命中时返回 None（未分类）
    """
    for quadrant in quadrants:
        if quadrant.contains(point):
            return quadrant
    return None


def classify_items(
    items: Iterable[Item],
    quadrants: Sequence[Quadrant],
) -> List[Tuple[Item, Optional[Quadrant]]]:
    """批量分类，保持条目原有顺序"""
    return [(item, classify(item.point, quadrants)) for item in items]


def group_by_quadrant(
    items: Iterable[Item],
    quadrants: Sequence[Quadrant],
) -> Tuple["OrderedDict[str, List[Item]]", List[Item]]:
    """
    按象限分组

    Returns:
        (按象限顺序排列的 {象限 id: 条目列表}, 未分类条目列表)
    """
    groups: "OrderedDict[str, List[Item]]" = OrderedDict((q.id, []) for q in quadrants)
    unclassified: List[Item] = []

    for item, quadrant in classify_items(items, quadrants):
        if quadrant is None:
            unclassified.append(item)
        else:
            groups[quadrant.id].append(item)

    return groups, unclassified


# ==================== 象限集合构建 ====================

def build_default_quadrants(x_label: str, y_label: str) -> Tuple[Quadrant, ...]:
    """
    生成默认的四象限划分

    顺序固定为：高X/高Y、低X/高Y、低X/低Y、高X/低Y。
    四条规则互斥且覆盖 [0,100]²。
    """
    x_low, x_high = f"Low {x_label}", f"High {x_label}"
    y_low, y_high = f"Low {y_label}", f"High {y_label}"
    x_lower, y_lower = x_label.lower(), y_label.lower()

    return (
        Quadrant(
            id="Q1",
            name=f"{x_high} / {y_high}",
            description=f"Items with high {x_lower} and high {y_lower}",
            implication="High priority items requiring immediate attention",
            rule=f"x >= {MIDLINE} && y >= {MIDLINE}",
            color="#ef4444",
        ),
        Quadrant(
            id="Q2",
            name=f"{x_low} / {y_high}",
            description=f"Items with low {x_lower} and high {y_lower}",
            implication="Important but not urgent items",
            rule=f"x < {MIDLINE} && y >= {MIDLINE}",
            color="#f97316",
        ),
        Quadrant(
            id="Q3",
            name=f"{x_low} / {y_low}",
            description=f"Items with low {x_lower} and low {y_lower}",
            implication="Low priority items that can be deprioritized",
            rule=f"x < {MIDLINE} && y < {MIDLINE}",
            color="#22c55e",
        ),
        Quadrant(
            id="Q4",
            name=f"{x_high} / {y_low}",
            description=f"Items with high {x_lower} and low {y_lower}",
            implication="Items that may need attention but are not critical",
            rule=f"x >= {MIDLINE} && y < {MIDLINE}",
            color="#3b82f6",
        ),
    )


def _to_quadrant(definition: QuadrantLike, index: int) -> Quadrant:
    if isinstance(definition, Quadrant):
        return definition

    quadrant_id = definition.get("id") if isinstance(definition, Mapping) else None
    try:
        return Quadrant.from_dict(dict(definition))
    except RuleParseError as e:
        raise QuadrantSetError(
            f"象限 '{quadrant_id}' 的规则无法编译: {e}",
            quadrant_id=quadrant_id,
        ) from e
    except KeyError as e:
        raise QuadrantSetError(
            f"第 {index + 1} 个象限缺少必填字段 {e}",
            quadrant_id=quadrant_id,
        ) from e
    except (TypeError, ValueError) as e:
        raise QuadrantSetError(
            f"第 {index + 1} 个象限定义非法: {e}",
            quadrant_id=quadrant_id,
        ) from e


def build_quadrant_set(
    x_label: str,
    y_label: str,
    custom: Optional[Sequence[QuadrantLike]] = None,
) -> Tuple[Quadrant, ...]:
    """
    构建象限集合

    Args:
        x_label: X 轴名称
        y_label: Y 轴名称
        custom: 可选的自定义象限（Quadrant 或字典），不保证覆盖整个平面

    Returns:
        有序的象限元组

    Raises:
        QuadrantSetError: 自定义集合为空、id 重复或规则非法
    """
    if custom is None:
        return build_default_quadrants(x_label, y_label)

    if len(custom) == 0:
        raise QuadrantSetError("自定义象限集合不能为空")

    quadrants = tuple(_to_quadrant(definition, i) for i, definition in enumerate(custom))

    seen = set()
    for quadrant in quadrants:
        if quadrant.id in seen:
            raise QuadrantSetError(f"象限 id '{quadrant.id}' 重复", quadrant_id=quadrant.id)
        seen.add(quadrant.id)

    return quadrants
