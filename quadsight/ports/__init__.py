"""
端口层 - 外部能力的抽象接口

包含：
- ContentAnalyzerPort: 内容分析（LLM）
- FileExtractorPort: 文件内容提取
- AnalysisStorePort: 临时存储
"""

from quadsight.ports.interfaces import (
    PortError,
    AnalyzerUnavailableError,
    AnalyzerError,
    ExtractionError,
    ExtractedText,
    ContentAnalyzerPort,
    FileExtractorPort,
    AnalysisStorePort,
)

__all__ = [
    "PortError",
    "AnalyzerUnavailableError",
    "AnalyzerError",
    "ExtractionError",
    "ExtractedText",
    "ContentAnalyzerPort",
    "FileExtractorPort",
    "AnalysisStorePort",
]
