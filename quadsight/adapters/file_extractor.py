"""
文件提取适配器 - 实现 FileExtractorPort

支持：
- text/plain: UTF-8 解码（非法字节替换）
- application/pdf: pypdf 逐页提取
- DOCX: python-docx 段落提取
- application/msword: 旧版 .doc 的可打印字节抢救
"""

import logging
import re
from io import BytesIO
from typing import Callable, Dict, Optional

import docx
from pypdf import PdfReader

from quadsight.infrastructure.logging import log_performance
from quadsight.ports.interfaces import ExtractedText, ExtractionError, FileExtractorPort


logger = logging.getLogger(__name__)


MIME_TEXT = "text/plain"
MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_DOC = "application/msword"

ALLOWED_MIME_TYPES = (MIME_TEXT, MIME_PDF, MIME_DOCX, MIME_DOC)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
PREVIEW_LENGTH = 200
PREVIEW_CUT_RATIO = 0.7
MIN_SALVAGED_CHARS = 100

_SALVAGE_DISALLOWED = re.compile(r"[^\w\s.,!?;:()\-\"']")
_WHITESPACE = re.compile(r"\s+")


# ==================== 文本工具 ====================

def count_words(text: str) -> int:
    """按空白切分计数"""
    return len(text.split())


def create_preview(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    """
    生成预览

    超长时优先在句末（. ! ?）截断，其次在空格截断，
    两者都只在超过 70% 长度处才生效；截断后追加 "..."。
    """
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    threshold = max_length * PREVIEW_CUT_RATIO

    last_sentence_end = max(truncated.rfind("."), truncated.rfind("!"), truncated.rfind("?"))
    if last_sentence_end > threshold:
        return truncated[:last_sentence_end + 1] + "..."

    last_space = truncated.rfind(" ")
    if last_space > threshold:
        return truncated[:last_space] + "..."

    return truncated + "..."


def salvage_printable_text(file_bytes: bytes) -> str:
    """从二进制文档中抢救可打印 ASCII 文本"""
    text = "".join(chr(b) for b in file_bytes if 32 <= b <= 126)
    text = _SALVAGE_DISALLOWED.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def validate_upload(size: int, mime_type: str, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
    """
    提取前的大小与类型检查

    Raises:
        ExtractionError: 文件过大或类型不支持
    """
    if size > max_bytes:
        raise ExtractionError(
            f"File size must be less than {max_bytes // (1024 * 1024)}MB",
            source="file_extractor",
        )
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ExtractionError(
            "File type not supported. Please use PDF, DOCX, DOC, or TXT files.",
            source="file_extractor",
        )


# ==================== 适配器 ====================

class DocumentExtractor(FileExtractorPort):
    """
    文档提取适配器

    实现 FileExtractorPort 接口，按 MIME 类型分派到具体解析函数。
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES, preview_length: int = PREVIEW_LENGTH):
        """
        初始化适配器

        Args:
            max_bytes: 允许的最大文件字节数
            preview_length: 预览最大字符数
        """
        self.max_bytes = max_bytes
        self.preview_length = preview_length
        self._handlers: Dict[str, Callable[[bytes], str]] = {
            MIME_TEXT: self._extract_text,
            MIME_PDF: self._extract_pdf,
            MIME_DOCX: self._extract_docx,
            MIME_DOC: self._extract_doc,
        }

    @log_performance(logger)
    def extract(
        self,
        file_bytes: bytes,
        mime_type: str,
        filename: Optional[str] = None,
    ) -> ExtractedText:
        """提取文件文本"""
        validate_upload(len(file_bytes), mime_type, self.max_bytes)

        try:
            text = self._handlers[mime_type](file_bytes)
        except ExtractionError:
            raise
        except Exception as e:
            logger.warning(f"文件解析失败 {filename or '<unnamed>'} ({mime_type}): {e}")
            raise ExtractionError(f"Failed to process file: {e}", source="file_extractor")

        return ExtractedText(
            text=text,
            word_count=count_words(text),
            preview=create_preview(text, self.preview_length),
        )

    def _extract_text(self, file_bytes: bytes) -> str:
        text = file_bytes.decode("utf-8", errors="replace")
        if not text:
            raise ExtractionError("Failed to read text file", source="file_extractor")
        return text

    def _extract_pdf(self, file_bytes: bytes) -> str:
        reader = PdfReader(BytesIO(file_bytes))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages).strip()

    def _extract_docx(self, file_bytes: bytes) -> str:
        document = docx.Document(BytesIO(file_bytes))
        return "\n".join(p.text for p in document.paragraphs if p.text).strip()

    def _extract_doc(self, file_bytes: bytes) -> str:
        text = salvage_printable_text(file_bytes)
        if len(text) < MIN_SALVAGED_CHARS:
            raise ExtractionError(
                "Could not extract text from Word document. "
                "Please try converting to PDF or plain text.",
                source="file_extractor",
            )
        return text
