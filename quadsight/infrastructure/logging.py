"""
日志系统 - 结构化日志配置

提供：
- 结构化 JSON 日志（生产环境）
- 彩色控制台日志（开发环境）
- 操作上下文（开始/完成/失败 + 耗时）
- 性能日志装饰器
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional


# LogRecord 上可能携带的附加字段
EXTRA_FIELDS = ("request_id", "analysis_id", "duration_ms", "extra_data")


class StructuredFormatter(logging.Formatter):
    """结构化 JSON 日志格式化器"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data["data" if name == "extra_data" else name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    """简单的彩色日志格式化器（开发环境）"""

    COLORS = {
        'DEBUG': '\033[36m',     # 青色
        'INFO': '\033[32m',      # 绿色
        'WARNING': '\033[33m',   # 黄色
        'ERROR': '\033[31m',     # 红色
        'CRITICAL': '\033[35m',  # 紫色
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

        msg = f"{color}[{timestamp}] [{record.levelname}]{self.RESET} {record.name}: {record.getMessage()}"

        request_id = getattr(record, 'request_id', None)
        if request_id:
            msg = f"{color}[{request_id}]{self.RESET} {msg}"

        duration = getattr(record, 'duration_ms', None)
        if duration is not None:
            msg += f" ({duration:.2f}ms)"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    配置日志系统

    Args:
        level: 日志级别
        json_format: 是否使用 JSON 格式
        log_file: 日志文件路径（可选，总是 JSON 格式）

    Returns:
        logging.Logger: 根日志记录器
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter() if json_format else SimpleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """获取命名日志记录器"""
    return logging.getLogger(name)


class LogContext:
    """
    日志上下文管理器

    用法：
        with LogContext(logger, "内容分析", request_id=rid, domain="risk"):
            ...
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        request_id: Optional[str] = None,
        **extra
    ):
        self.logger = logger
        self.operation = operation
        self.request_id = request_id
        self.extra = extra
        self.start_time: Optional[float] = None

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return (time.perf_counter() - self.start_time) * 1000

    def _extra(self, **fields) -> Dict[str, Any]:
        data = {'request_id': self.request_id, 'extra_data': self.extra}
        data.update(fields)
        return data

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"开始 {self.operation}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = self.elapsed_ms
        if exc_type:
            self.logger.error(
                f"失败 {self.operation}: {exc_val}",
                extra=self._extra(duration_ms=duration),
                exc_info=True,
            )
        else:
            self.logger.info(
                f"完成 {self.operation}",
                extra=self._extra(duration_ms=duration),
            )
        return False


def log_performance(logger: Optional[logging.Logger] = None):
    """性能日志装饰器（记录耗时，异常照常抛出）"""
    def decorator(func):
        func_logger = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.warning(
                    f"{func.__name__} 执行失败: {e}",
                    extra={'duration_ms': (time.perf_counter() - start_time) * 1000},
                )
                raise
            func_logger.debug(
                f"{func.__name__} 执行成功",
                extra={'duration_ms': (time.perf_counter() - start_time) * 1000},
            )
            return result
        return wrapper
    return decorator
