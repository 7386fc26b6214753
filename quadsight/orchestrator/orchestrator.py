"""
分析编排器 - 统一分析入口

设计原则：
1. 单一入口：所有分析通过 AnalysisOrchestrator.run 处理
2. 依赖注入：分析器通过构造函数注入，可为空（演示模式）
3. 优雅降级：分析器不可用或出错时返回带标记的占位结果，而不是失败
4. 可观测性：每次分析都记录开始、完成与耗时
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple, Union

from quadsight.domain.insights import aggregate, overall_confidence
from quadsight.domain.models import (
    AnalysisMetadata,
    AnalysisResult,
    AnalyzerOutput,
    Axes,
    Domain,
    ForcedAxes,
    Item,
)
from quadsight.domain.quadrants import QuadrantLike, build_quadrant_set
from quadsight.infrastructure.logging import LogContext
from quadsight.ports.interfaces import (
    AnalyzerError,
    AnalyzerUnavailableError,
    ContentAnalyzerPort,
)


logger = logging.getLogger(__name__)


DEMO_MODE_NOTE = (
    "Demo Mode: This is sample analysis. Configure OpenAI API key for AI-powered analysis."
)
FALLBACK_NOTE = (
    "Note: This is a demonstration analysis. Configure OpenAI API key for full AI-powered analysis."
)


# ==================== 占位结果 ====================

PLACEHOLDER_ITEMS: Tuple[Item, ...] = (
    Item(
        name="Item A",
        x=75,
        y=85,
        confidence=0.9,
        rationale="High on both dimensions based on content analysis",
        citations=("Sample citation from text...",),
    ),
    Item(
        name="Item B",
        x=25,
        y=65,
        confidence=0.8,
        rationale="Low X but moderate Y based on characteristics",
        citations=("Another sample citation...",),
    ),
    Item(
        name="Item C",
        x=60,
        y=30,
        confidence=0.7,
        rationale="Moderate X but low Y value",
        citations=("Third citation example...",),
    ),
)

PLACEHOLDER_INSIGHTS: Tuple[str, ...] = (
    "Most items cluster in the high-impact region",
    "There is a clear separation between high and low probability items",
    "Focus attention on the high-probability, high-impact quadrant first",
)


def placeholder_output(domain: Domain) -> AnalyzerOutput:
    """固定的确定性占位分析（风险领域用 Probability/Impact，其余用 Importance/Urgency）"""
    is_risk = domain == Domain.RISK
    return AnalyzerOutput(
        axes=Axes(
            x_label="Probability" if is_risk else "Importance",
            y_label="Impact" if is_risk else "Urgency",
            rationale="These variables provide the best separation of items in the content",
        ),
        items=PLACEHOLDER_ITEMS,
        insights=PLACEHOLDER_INSIGHTS,
    )


# ==================== 编排器 ====================

class AnalysisOrchestrator:
    """
    分析编排器

    职责：
    1. 调用内容分析器得到坐标轴与条目（失败时使用占位结果）
    2. 应用强制坐标轴名称
    3. 构建象限集合（默认或自定义）
    4. 聚合数据洞察与整体置信度
    5. 组装 AnalysisResult
    """

    def __init__(self, analyzer: Optional[ContentAnalyzerPort] = None):
        """
        初始化编排器

        Args:
            analyzer: 内容分析端口（为空时始终返回演示结果）
        """
        self.analyzer = analyzer

    @property
    def has_analyzer(self) -> bool:
        return self.analyzer is not None

    def run(
        self,
        raw_content: str,
        domain_hint: Union[Domain, str] = Domain.AUTO,
        forced_axes: Optional[ForcedAxes] = None,
        custom_quadrants: Optional[Sequence[QuadrantLike]] = None,
        request_id: Optional[str] = None,
    ) -> AnalysisResult:
        """
        执行一次分析

        Args:
            raw_content: 待分析文本
            domain_hint: 领域提示
            forced_axes: 强制坐标轴名称（可只指定其一）
            custom_quadrants: 自定义象限集合（可选）
            request_id: 请求ID（仅用于日志）

        Returns:
            AnalysisResult: 分析结果；分析器失败时为占位结果

        Raises:
            QuadrantSetError: 自定义象限集合非法
        """
        start_time = time.perf_counter()
        domain = Domain(domain_hint)
        forced_axes = forced_axes or ForcedAxes()

        # 自定义象限与坐标轴名称无关，先校验，避免无谓的模型调用
        custom_set = None
        if custom_quadrants is not None:
            custom_set = build_quadrant_set("", "", custom_quadrants)

        with LogContext(
            logger,
            "内容分析",
            request_id=request_id,
            domain=domain.value,
            text_length=len(raw_content),
        ):
            output, notes, fallback_reason = self._analyze(raw_content, domain, forced_axes)

            axes = forced_axes.apply(output.axes)
            quadrants = custom_set or build_quadrant_set(axes.x_label, axes.y_label)
            data_insights = aggregate(output.items, quadrants, axes)

            extra = {
                "domain": domain.value,
                "text_length": len(raw_content),
                "using_mock_data": fallback_reason is not None or not self.has_analyzer,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            if fallback_reason:
                extra["fallback_reason"] = fallback_reason

            metadata = AnalysisMetadata(
                processing_time=time.perf_counter() - start_time,
                confidence=overall_confidence(output.items),
                extra=extra,
            )

        return AnalysisResult(
            axes=axes,
            items=output.items,
            quadrants=quadrants,
            insights=tuple(notes) + output.insights,
            metadata=metadata,
            data_insights=data_insights,
        )

    def _analyze(
        self,
        raw_content: str,
        domain: Domain,
        forced_axes: ForcedAxes,
    ) -> Tuple[AnalyzerOutput, Tuple[str, ...], Optional[str]]:
        """
        调用分析器

        Returns:
            (分析输出, 插在洞察前的说明, 降级原因)
        """
        if self.analyzer is None:
            return placeholder_output(domain), (DEMO_MODE_NOTE,), None

        try:
            output = self.analyzer.analyze(raw_content, domain, forced_axes)
        except (AnalyzerUnavailableError, AnalyzerError) as e:
            logger.warning(f"分析器失败，使用占位结果: {e}")
            return placeholder_output(domain), (FALLBACK_NOTE,), e.message

        return output, (), None


# 工厂函数：便于创建 AnalysisOrchestrator 实例
def create_orchestrator(analyzer: Optional[ContentAnalyzerPort] = None) -> AnalysisOrchestrator:
    """
    创建 AnalysisOrchestrator 实例

    便于依赖注入和测试
    """
    return AnalysisOrchestrator(analyzer=analyzer)
