"""
依赖注入 - FastAPI 依赖配置

集中管理所有服务的创建和注入。
服务容器在 create_app 中创建并挂在 app.state 上，不使用模块级单例；
定期清理任务在应用 lifespan 中启动和停止。
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import Depends, Request

from quadsight import __version__
from quadsight.adapters.file_extractor import DocumentExtractor
from quadsight.adapters.llm_adapter import LiteLLMAnalyzerAdapter
from quadsight.adapters.memory_store import InMemoryStore
from quadsight.domain.models import AnalysisResult
from quadsight.infrastructure.scheduler import start_eviction_scheduler
from quadsight.orchestrator import AnalysisOrchestrator, create_orchestrator
from quadsight.ports.interfaces import AnalysisStorePort, ContentAnalyzerPort
from quadsight.presentation import ReportWriter, create_report_writer
from quadsight.use_cases import ProcessFilesUseCase, ProcessedFile


load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# 配置类
class Settings:
    """应用配置（实例化时读取环境变量，关键字参数可覆盖）"""

    def __init__(self, **overrides: Any):
        # 基本配置
        self.APP_NAME: str = os.getenv('APP_NAME', 'QuadSight API')
        self.APP_VERSION: str = __version__
        self.DEBUG: bool = _env_bool('DEBUG', False)
        self.ENVIRONMENT: str = os.getenv('ENVIRONMENT', 'development')

        # 服务配置
        self.HOST: str = os.getenv('HOST', '0.0.0.0')
        self.PORT: int = int(os.getenv('PORT', '8000'))

        # CORS 配置
        self.CORS_ORIGINS: List[str] = [
            o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()
        ]

        # LLM 配置
        self.LLM_PROVIDER: str = os.getenv('LLM_PROVIDER', 'openai')
        self.LLM_MODEL: str = os.getenv('LLM_MODEL', 'gpt-4o')
        self.LLM_API_KEY: Optional[str] = os.getenv('LLM_API_KEY') or os.getenv('OPENAI_API_KEY')
        self.LLM_API_BASE: Optional[str] = os.getenv('LLM_API_BASE') or None
        self.LLM_TIMEOUT: float = float(os.getenv('LLM_TIMEOUT', '60'))

        # 存储与清理
        self.STORE_MAX_AGE_DAYS: float = float(os.getenv('STORE_MAX_AGE_DAYS', '7'))
        self.EVICTION_INTERVAL_MINUTES: float = float(os.getenv('EVICTION_INTERVAL_MINUTES', '60'))
        self.EVICTION_ENABLED: bool = _env_bool('EVICTION_ENABLED', True)

        # 输入限制
        self.MIN_TEXT_LENGTH: int = int(os.getenv('MIN_TEXT_LENGTH', '10'))
        self.MAX_TEXT_LENGTH: int = int(os.getenv('MAX_TEXT_LENGTH', '50000'))
        self.MAX_FILE_SIZE_MB: float = float(os.getenv('MAX_FILE_SIZE_MB', '10'))

        # 日志
        self.LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_JSON: bool = _env_bool('LOG_JSON', False)
        self.LOG_FILE: Optional[str] = os.getenv('LOG_FILE') or None

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise AttributeError(f"未知配置项: {name}")
            setattr(self, name, value)

    @property
    def max_file_bytes(self) -> int:
        return int(self.MAX_FILE_SIZE_MB * 1024 * 1024)

    @property
    def store_max_age(self) -> timedelta:
        return timedelta(days=self.STORE_MAX_AGE_DAYS)


@lru_cache()
def get_settings() -> Settings:
    """获取应用配置"""
    return Settings()


@dataclass(frozen=True)
class StoredAnalysis:
    """已保存的分析记录"""
    id: str
    domain: str
    text: str
    result: AnalysisResult
    file_ids: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "domain": self.domain,
            "created_at": self.created_at,
            "file_ids": list(self.file_ids),
            "axes": self.result.axes.to_dict(),
            "item_count": len(self.result.items),
            "confidence": self.result.metadata.confidence,
        }


class ServiceContainer:
    """
    服务容器 - 管理所有服务实例

    每个应用一个实例，由 create_app 创建。
    """

    def __init__(
        self,
        settings: Settings,
        analyzer: Optional[ContentAnalyzerPort] = None,
    ):
        """
        初始化服务容器

        Args:
            settings: 应用配置
            analyzer: 内容分析器（为空时按配置创建；未配置 API 密钥则为演示模式）
        """
        self.settings = settings
        self.started_at = datetime.now(timezone.utc)

        self._analyzer = analyzer if analyzer is not None else self._init_analyzer()
        self._orchestrator = create_orchestrator(self._analyzer)
        self._report_writer = create_report_writer()
        self._process_files = ProcessFilesUseCase(DocumentExtractor(max_bytes=settings.max_file_bytes))

        self._analyses: InMemoryStore[StoredAnalysis] = InMemoryStore(name="analyses")
        self._files: InMemoryStore[ProcessedFile] = InMemoryStore(name="files")

        self._scheduler: Optional[BackgroundScheduler] = None

    def _init_analyzer(self) -> Optional[ContentAnalyzerPort]:
        """初始化 LLM 适配器"""
        if not self.settings.LLM_API_KEY:
            logger.info("未配置 LLM API 密钥，使用演示模式")
            return None

        return LiteLLMAnalyzerAdapter(
            provider=self.settings.LLM_PROVIDER,
            model=self.settings.LLM_MODEL,
            api_key=self.settings.LLM_API_KEY,
            api_base=self.settings.LLM_API_BASE,
            timeout=self.settings.LLM_TIMEOUT,
        )

    def start(self) -> None:
        """启动后台任务"""
        self._scheduler = start_eviction_scheduler(
            [self._analyses, self._files],
            max_age=self.settings.store_max_age,
            interval_minutes=self.settings.EVICTION_INTERVAL_MINUTES,
            enabled=self.settings.EVICTION_ENABLED,
        )

    def shutdown(self) -> None:
        """停止后台任务"""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

    @property
    def scheduler_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def analyzer(self) -> Optional[ContentAnalyzerPort]:
        return self._analyzer

    @property
    def orchestrator(self) -> AnalysisOrchestrator:
        return self._orchestrator

    @property
    def report_writer(self) -> ReportWriter:
        return self._report_writer

    @property
    def process_files(self) -> ProcessFilesUseCase:
        return self._process_files

    @property
    def analyses(self) -> AnalysisStorePort[StoredAnalysis]:
        return self._analyses

    @property
    def files(self) -> AnalysisStorePort[ProcessedFile]:
        return self._files


def get_service_container(request: Request) -> ServiceContainer:
    """FastAPI 依赖：获取当前应用的服务容器"""
    return request.app.state.container


def get_orchestrator(container: ServiceContainer = Depends(get_service_container)) -> AnalysisOrchestrator:
    """FastAPI 依赖：获取编排器"""
    return container.orchestrator


def get_report_writer(container: ServiceContainer = Depends(get_service_container)) -> ReportWriter:
    """FastAPI 依赖：获取报告生成器"""
    return container.report_writer


def get_process_files(container: ServiceContainer = Depends(get_service_container)) -> ProcessFilesUseCase:
    """FastAPI 依赖：获取文件处理用例"""
    return container.process_files


def get_analysis_store(
    container: ServiceContainer = Depends(get_service_container),
) -> AnalysisStorePort[StoredAnalysis]:
    """FastAPI 依赖：获取分析记录存储"""
    return container.analyses


def get_file_store(
    container: ServiceContainer = Depends(get_service_container),
) -> AnalysisStorePort[ProcessedFile]:
    """FastAPI 依赖：获取文件存储"""
    return container.files


def get_app_settings(container: ServiceContainer = Depends(get_service_container)) -> Settings:
    """FastAPI 依赖：获取当前应用的配置"""
    return container.settings
