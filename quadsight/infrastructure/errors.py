"""
错误处理 - 统一错误定义和处理

提供：
- 业务异常类层次（带错误码，可直接序列化为 API 错误响应）
- 领域/端口异常到业务异常的转换
- 重试机制
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from quadsight.domain.models import ErrorCode
from quadsight.domain.quadrants import QuadrantSetError
from quadsight.domain.rules import RuleParseError
from quadsight.ports.interfaces import (
    AnalyzerError,
    AnalyzerUnavailableError,
    ExtractionError,
)


logger = logging.getLogger(__name__)


# ==================== 异常类层次 ====================

class QuadSightError(Exception):
    """QuadSight 基础异常"""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(QuadSightError):
    """输入校验错误"""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_INPUT,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"field": field} if field else {}
        )


class ResourceNotFoundError(QuadSightError):
    """资源未找到错误"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            message=f"{resource_type} '{resource_id}' 未找到",
            error_code=ErrorCode.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class LLMError(QuadSightError):
    """LLM 服务错误"""

    status_code = 502

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.LLM_ERROR,
            details={"provider": provider}
        )


def to_quadsight_error(e: Exception, field: Optional[str] = None) -> QuadSightError:
    """
    将领域/端口异常转换为 QuadSightError

    Args:
        e: 原始异常
        field: 出错的请求字段（可选）
    """
    if isinstance(e, QuadSightError):
        return e
    if isinstance(e, RuleParseError):
        error = ValidationError(e.message, field=field, error_code=ErrorCode.RULE_PARSE_ERROR)
        if e.position is not None:
            error.details["position"] = e.position
        return error
    if isinstance(e, QuadrantSetError):
        error = ValidationError(e.message, field=field, error_code=ErrorCode.RULE_PARSE_ERROR)
        if e.quadrant_id:
            error.details["quadrant_id"] = e.quadrant_id
        return error
    if isinstance(e, ExtractionError):
        return ValidationError(e.message, field=field, error_code=ErrorCode.EXTRACTION_ERROR)
    if isinstance(e, (AnalyzerUnavailableError, AnalyzerError)):
        return LLMError(e.message, provider=e.source)

    return QuadSightError(
        message=str(e),
        error_code=ErrorCode.INTERNAL_ERROR,
        details={"original_type": type(e).__name__}
    )


# ==================== 重试机制 ====================

T = TypeVar('T')


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None
):
    """
    重试装饰器

    Args:
        max_attempts: 最大尝试次数
        delay: 初始延迟（秒）
        backoff: 延迟增长因子
        exceptions: 需要重试的异常类型
        on_retry: 重试时的回调函数
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"{func.__name__} 在 {max_attempts} 次尝试后仍然失败")
                        raise
                    if on_retry:
                        on_retry(e, attempt)
                    else:
                        logger.warning(
                            f"{func.__name__} 第 {attempt} 次尝试失败: {e}，"
                            f"{current_delay:.1f}秒后重试"
                        )
                    time.sleep(current_delay)
                    current_delay *= backoff

            raise ValueError("max_attempts 必须大于等于 1")

        return wrapper
    return decorator
