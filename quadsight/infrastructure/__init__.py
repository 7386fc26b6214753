"""
基础设施层 - 横切关注点

包含：
- logging: 结构化日志系统
- errors: 错误层次、异常转换和重试机制
- scheduler: 存储定期清理任务
"""

from quadsight.infrastructure.logging import (
    setup_logging,
    get_logger,
    LogContext,
    log_performance,
    StructuredFormatter,
    SimpleFormatter,
)
from quadsight.infrastructure.errors import (
    QuadSightError,
    ValidationError,
    ResourceNotFoundError,
    LLMError,
    to_quadsight_error,
    retry,
)
from quadsight.infrastructure.scheduler import (
    run_eviction,
    start_eviction_scheduler,
)

__all__ = [
    # 日志
    "setup_logging",
    "get_logger",
    "LogContext",
    "log_performance",
    "StructuredFormatter",
    "SimpleFormatter",
    # 错误
    "QuadSightError",
    "ValidationError",
    "ResourceNotFoundError",
    "LLMError",
    "to_quadsight_error",
    "retry",
    # 调度
    "run_eviction",
    "start_eviction_scheduler",
]
