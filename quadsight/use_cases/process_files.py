"""
文件处理用例 - 批量提取上传文件的文本

每个文件独立处理：单个文件失败只记录在该文件的 error 字段，不影响整批。
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from quadsight.ports.interfaces import ExtractionError, FileExtractorPort
from quadsight.use_cases.base import UseCase


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """待处理的上传文件"""
    name: str
    content_type: str
    data: bytes
    size: Optional[int] = None   # 声明的原始大小，data 可能只读了前一部分


@dataclass(frozen=True)
class ProcessedFile:
    """文件处理结果"""
    id: str
    name: str
    type: str
    size: int
    content: str = ""
    preview: str = ""
    word_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)

    def to_dict(self, include_content: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "preview": self.preview,
            "word_count": self.word_count,
            "error": self.error,
        }
        if include_content:
            data["content"] = self.content
        return data


def combine_file_contents(files: Iterable[ProcessedFile]) -> str:
    """把成功提取的文件拼接为一段文本，每个文件以 === 文件名 === 开头"""
    return "\n\n".join(
        f"=== {f.name} ===\n\n{f.content}"
        for f in files
        if f.ok
    )


class ProcessFilesUseCase(UseCase[Iterable[UploadedFile], List[ProcessedFile]]):
    """
    批量文件处理用例

    输入：上传文件列表
    输出：逐个文件的提取结果（顺序与输入一致）
    """

    def __init__(self, extractor: FileExtractorPort):
        """
        初始化用例

        Args:
            extractor: 文件提取端口
        """
        self.extractor = extractor

    def execute(self, uploads: Iterable[UploadedFile]) -> List[ProcessedFile]:
        results = []
        for upload in uploads:
            results.append(self._process_one(upload))

        failed = sum(1 for r in results if r.error)
        logger.info(f"文件处理完成: 共 {len(results)} 个, 失败 {failed} 个")
        return results

    def _process_one(self, upload: UploadedFile) -> ProcessedFile:
        file_id = uuid.uuid4().hex
        base = dict(
            id=file_id,
            name=upload.name,
            type=upload.content_type,
            size=upload.size if upload.size is not None else len(upload.data),
        )

        try:
            extracted = self.extractor.extract(upload.data, upload.content_type, upload.name)
        except ExtractionError as e:
            logger.warning(f"文件 {upload.name} 处理失败: {e.message}")
            return ProcessedFile(**base, error=e.message)

        return ProcessedFile(
            **base,
            content=extracted.text,
            preview=extracted.preview,
            word_count=extracted.word_count,
        )
