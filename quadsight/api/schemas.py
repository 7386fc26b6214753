"""
API 请求/响应模型 - Pydantic Schema 定义

所有 API 的输入输出都通过这些模型定义，
确保类型安全和自动文档生成。
文本长度、领域提示等业务校验放在路由中完成，统一返回 400。
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ==================== 枚举类型 ====================

class ExportFormatEnum(str, Enum):
    """导出格式"""
    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


class SortOrderEnum(str, Enum):
    """排序方向"""
    ASC = "asc"
    DESC = "desc"


# ==================== 通用模型 ====================

class AxesModel(BaseModel):
    """坐标轴"""
    x: str = Field(..., description="X 轴名称")
    y: str = Field(..., description="Y 轴名称")
    rationale: str = Field(default="", description="选择理由")


class ItemModel(BaseModel):
    """条目"""
    name: str
    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0, le=1)
    rationale: str = ""
    citations: List[str] = Field(default_factory=list)


class QuadrantModel(BaseModel):
    """象限定义（rule 为受限规则语言，如 'x >= 50 && y >= 50'）"""
    id: str = Field(..., min_length=1, description="象限 ID")
    name: Optional[str] = Field(default=None, description="显示名称（默认等于 id）")
    rule: str = Field(..., description="边界规则")
    description: str = ""
    implication: str = ""
    color: Optional[str] = Field(default=None, description="颜色（默认 #3b82f6）")


class GeneratedInsightModel(BaseModel):
    """数据洞察"""
    kind: str
    title: str
    description: str
    related_items: List[ItemModel] = Field(default_factory=list)


class ForceAxesModel(BaseModel):
    """强制坐标轴名称"""
    x: Optional[str] = None
    y: Optional[str] = None


# ==================== 请求模型 ====================

class AnalyzeRequest(BaseModel):
    """分析请求"""
    text: Optional[str] = Field(
        default=None,
        description="待分析文本，10-50,000 字符"
    )
    files: List[str] = Field(
        default_factory=list,
        description="已上传文件的 ID，内容会追加到文本之后"
    )
    domain_hint: str = Field(
        default="auto",
        description="领域提示：risk, priority, investments, sports, auto"
    )
    force_axes: Optional[ForceAxesModel] = Field(
        default=None,
        description="强制使用的坐标轴名称"
    )
    quadrants: Optional[List[QuadrantModel]] = Field(
        default=None,
        description="自定义象限集合（按顺序匹配，第一个命中的象限生效）"
    )


class ClassifyRequest(BaseModel):
    """单点分类请求"""
    x: float = Field(..., description="X 坐标 [0, 100]")
    y: float = Field(..., description="Y 坐标 [0, 100]")
    quadrants: Optional[List[QuadrantModel]] = Field(default=None, description="自定义象限集合")
    x_label: str = Field(default="X", description="默认象限使用的 X 轴名称")
    y_label: str = Field(default="Y", description="默认象限使用的 Y 轴名称")


# ==================== 响应模型 ====================

class AnalysisResponse(BaseModel):
    """分析结果"""
    axes: AxesModel
    items: List[ItemModel]
    quadrants: List[QuadrantModel]
    insights: List[str]
    metadata: Dict[str, Any] = Field(..., description="processing_time, confidence 及附加字段")
    data_insights: List[GeneratedInsightModel] = Field(default_factory=list)


class CommonAxesModel(BaseModel):
    """领域常用坐标轴"""
    x: List[str] = Field(default_factory=list)
    y: List[str] = Field(default_factory=list)


class DomainModel(BaseModel):
    """分析领域"""
    id: str = Field(..., description="领域 ID，可作为 domain_hint")
    name: str
    description: str
    common_axes: CommonAxesModel
    examples: List[str] = Field(default_factory=list)


class DomainListResponse(BaseModel):
    """分析领域列表"""
    domains: List[DomainModel]


class AnalysisSummaryModel(BaseModel):
    """分析记录摘要"""
    id: str
    domain: str
    created_at: datetime
    file_ids: List[str] = Field(default_factory=list)
    axes: AxesModel
    item_count: int
    confidence: float


class AnalysisListResponse(BaseModel):
    """分析记录列表"""
    analyses: List[AnalysisSummaryModel]
    count: int


class ItemRowModel(ItemModel):
    """表格行：条目及其象限"""
    quadrant: Optional[QuadrantModel] = None


class ItemTableResponse(BaseModel):
    """条目表查询结果"""
    items: List[ItemRowModel]
    count: int


class ChartPointModel(BaseModel):
    """散点图数据点"""
    name: str
    x: float
    y: float
    confidence: float
    size: float
    color: str
    quadrant_id: Optional[str] = None


class ChartResponse(BaseModel):
    """散点图数据"""
    title: str
    x_label: str
    y_label: str
    points: List[ChartPointModel]


class ClassifyResponse(BaseModel):
    """单点分类结果（未命中任何象限时为 null）"""
    quadrant: Optional[QuadrantModel] = None


class FileInfo(BaseModel):
    """文件处理结果"""
    id: str
    name: str
    type: str
    size: int
    preview: str = ""
    word_count: int = 0
    error: Optional[str] = None
    content: Optional[str] = None


class FileUploadResponse(BaseModel):
    """文件上传响应"""
    files: List[FileInfo]
    processed: int = Field(..., description="成功处理的文件数")
    failed: int = Field(..., description="失败的文件数")


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = Field(..., description="healthy / partial / degraded")
    timestamp: datetime = Field(..., description="检查时间")
    version: str = Field(..., description="API 版本")
    environment: str = Field(default="development")
    uptime_seconds: float = Field(..., description="运行时长（秒）")
    response_time_ms: float = Field(..., description="检查耗时（毫秒）")
    components: Dict[str, str] = Field(default_factory=dict, description="组件状态")


class ErrorResponse(BaseModel):
    """错误响应"""
    success: bool = Field(default=False)
    error_code: str = Field(..., description="错误码")
    error_message: str = Field(..., description="错误信息")
    details: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = Field(default=None, description="请求 ID")
    timestamp: datetime = Field(default_factory=datetime.now)
