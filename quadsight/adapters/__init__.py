"""
适配器层 - 端口接口的具体实现

包含：
- LiteLLMAnalyzerAdapter: 基于 LiteLLM 的内容分析适配器
- DocumentExtractor: TXT / PDF / DOCX / DOC 文本提取适配器
- InMemoryStore: 进程内临时存储适配器
"""

from quadsight.adapters.llm_adapter import LiteLLMAnalyzerAdapter, AnalyzerPayload
from quadsight.adapters.file_extractor import DocumentExtractor
from quadsight.adapters.memory_store import InMemoryStore

__all__ = [
    "LiteLLMAnalyzerAdapter",
    "AnalyzerPayload",
    "DocumentExtractor",
    "InMemoryStore",
]
