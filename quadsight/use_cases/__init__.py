"""
用例层 - 业务逻辑的核心实现

只依赖 ports 接口，不依赖具体实现。

包含：
- ProcessFilesUseCase: 批量文件文本提取
"""

from quadsight.use_cases.base import UseCase
from quadsight.use_cases.process_files import (
    ProcessFilesUseCase,
    ProcessedFile,
    UploadedFile,
    combine_file_contents,
)

__all__ = [
    "UseCase",
    "ProcessFilesUseCase",
    "ProcessedFile",
    "UploadedFile",
    "combine_file_contents",
]
