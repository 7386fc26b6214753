"""
端口接口定义 - 依赖倒置的核心

所有外部能力（内容分析、文件提取、临时存储）都通过这些接口访问，
具体实现由适配器层提供。

设计原则：
1. 接口隔离：每个接口只包含相关的方法
2. 依赖倒置：编排层依赖接口，不依赖具体实现
3. 异常抽象：接口定义标准异常类型
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Generic, List, Optional, TypeVar

from quadsight.domain.models import AnalyzerOutput, Domain, ForcedAxes


T = TypeVar('T')


# ==================== 异常定义 ====================

class PortError(Exception):
    """端口层基础异常"""
    def __init__(self, message: str, source: str = "unknown"):
        self.message = message
        self.source = source
        super().__init__(f"[{source}] {message}")


class AnalyzerUnavailableError(PortError):
    """分析服务不可达（未配置、网络失败、超时）"""
    pass


class AnalyzerError(PortError):
    """分析服务返回了无法使用的结果"""
    pass


class ExtractionError(PortError):
    """文件内容提取失败"""
    pass


# ==================== 值对象 ====================

@dataclass(frozen=True)
class ExtractedText:
    """文件提取结果"""
    text: str
    word_count: int
    preview: str = ""


# ==================== 端口接口 ====================

class ContentAnalyzerPort(ABC):
    """内容分析端口 - 从原始文本生成坐标轴与条目坐标"""

    @abstractmethod
    def analyze(
        self,
        text: str,
        domain_hint: Domain = Domain.AUTO,
        forced_axes: Optional[ForcedAxes] = None,
    ) -> AnalyzerOutput:
        """
        分析文本

        Args:
            text: 待分析文本
            domain_hint: 领域提示
            forced_axes: 强制使用的坐标轴名称

        Returns:
            AnalyzerOutput: 已校验的坐标轴、条目与洞察

        Raises:
            AnalyzerUnavailableError: 服务不可达
            AnalyzerError: 返回内容格式错误
        """
        pass

    @abstractmethod
    def ping(self) -> bool:
        """连通性检查"""
        pass


class FileExtractorPort(ABC):
    """文件内容提取端口"""

    @abstractmethod
    def extract(
        self,
        file_bytes: bytes,
        mime_type: str,
        filename: Optional[str] = None,
    ) -> ExtractedText:
        """
        提取文件文本

        Args:
            file_bytes: 文件内容
            mime_type: 声明的 MIME 类型
            filename: 文件名（仅用于日志与错误信息）

        Returns:
            ExtractedText: 文本、词数与预览

        Raises:
            ExtractionError: 类型不支持、文件过大或解析失败
        """
        pass


class AnalysisStorePort(ABC, Generic[T]):
    """临时存储端口 - 带创建时间的键值存储"""

    @abstractmethod
    def put(self, key: str, value: T, created_at: Optional[datetime] = None) -> None:
        """写入（同键后写覆盖）"""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """读取，不存在时返回 None"""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """删除，返回是否存在"""
        pass

    @abstractmethod
    def list_recent(self, limit: int = 10) -> List[T]:
        """按创建时间倒序列出"""
        pass

    @abstractmethod
    def evict_older_than(self, max_age: timedelta) -> int:
        """清理早于 max_age 的条目，返回清理数量"""
        pass

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """统计信息"""
        pass
