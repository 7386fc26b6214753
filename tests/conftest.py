"""
测试配置 - pytest 配置和公共 fixtures
"""

import pytest
from unittest.mock import Mock

from quadsight.domain.models import (
    AnalysisMetadata,
    AnalysisResult,
    AnalyzerOutput,
    Axes,
    Item,
)
from quadsight.domain.quadrants import build_default_quadrants
from quadsight.ports.interfaces import ContentAnalyzerPort, ExtractedText, FileExtractorPort


# ==================== Fixtures ====================

@pytest.fixture
def mock_axes():
    """模拟坐标轴"""
    return Axes(x_label="Probability", y_label="Impact", rationale="Separates the risks")


@pytest.fixture
def mock_items():
    """模拟条目列表（每个默认象限至少一个）"""
    return [
        Item(
            name="Vendor outage",
            x=80,
            y=90,
            confidence=0.9,
            rationale="Single supplier with frequent incidents",
            citations=("the vendor failed twice last quarter",),
        ),
        Item(
            name="Data breach",
            x=20,
            y=95,
            confidence=0.85,
            rationale="Rare but catastrophic",
            citations=("a breach would expose customer records",),
        ),
        Item(
            name="Office move",
            x=30,
            y=20,
            confidence=0.7,
            rationale="Minor disruption",
        ),
        Item(
            name="Staff turnover",
            x=65,
            y=40,
            confidence=0.6,
            rationale="Two engineers are interviewing elsewhere",
        ),
    ]


@pytest.fixture
def default_quadrants(mock_axes):
    """默认四象限"""
    return build_default_quadrants(mock_axes.x_label, mock_axes.y_label)


@pytest.fixture
def mock_analyzer_output(mock_axes, mock_items):
    """模拟分析器输出"""
    return AnalyzerOutput(
        axes=mock_axes,
        items=mock_items,
        insights=("Mitigate the vendor dependency first",),
    )


@pytest.fixture
def mock_analyzer(mock_analyzer_output):
    """模拟内容分析端口"""
    port = Mock(spec=ContentAnalyzerPort)
    port.analyze.return_value = mock_analyzer_output
    port.ping.return_value = True
    return port


@pytest.fixture
def mock_extractor():
    """模拟文件提取端口"""
    port = Mock(spec=FileExtractorPort)
    port.extract.return_value = ExtractedText(
        text="Quarterly risk review notes.",
        word_count=4,
        preview="Quarterly risk review notes.",
    )
    return port


@pytest.fixture
def mock_result(mock_axes, mock_items, default_quadrants):
    """模拟分析结果"""
    return AnalysisResult(
        axes=mock_axes,
        items=mock_items,
        quadrants=default_quadrants,
        insights=("Mitigate the vendor dependency first",),
        metadata=AnalysisMetadata(
            processing_time=1.25,
            confidence=0.7625,
            extra={"domain": "risk", "using_mock_data": False},
        ),
    )
