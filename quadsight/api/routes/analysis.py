"""
分析路由 - 核心业务 API

提供文本分析、分析记录查询与导出、单点分类等端点。
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from quadsight.api.dependencies import (
    Settings,
    StoredAnalysis,
    get_analysis_store,
    get_file_store,
    get_orchestrator,
    get_report_writer,
    get_app_settings,
)
from quadsight.api.schemas import (
    AnalysisListResponse,
    AnalysisResponse,
    AnalysisSummaryModel,
    AnalyzeRequest,
    ChartResponse,
    ClassifyRequest,
    ClassifyResponse,
    DomainListResponse,
    ErrorResponse,
    ExportFormatEnum,
    ItemTableResponse,
    QuadrantModel,
    SortOrderEnum,
)
from quadsight.domain.domains import list_domain_profiles
from quadsight.domain.models import Domain, ForcedAxes, Point
from quadsight.domain.quadrants import QuadrantSetError, build_quadrant_set, classify
from quadsight.infrastructure.errors import (
    ResourceNotFoundError,
    ValidationError,
    to_quadsight_error,
)
from quadsight.orchestrator import AnalysisOrchestrator
from quadsight.ports.interfaces import AnalysisStorePort
from quadsight.presentation import (
    ReportFormat,
    ReportWriter,
    SortField,
    chart_points,
    items_to_csv,
    query_items,
    to_json,
)
from quadsight.use_cases import ProcessedFile, combine_file_contents


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "请求参数错误"},
    404: {"model": ErrorResponse, "description": "资源不存在"},
    500: {"model": ErrorResponse, "description": "服务器内部错误"},
}


def _quadrant_dicts(quadrants: Optional[List[QuadrantModel]]):
    if quadrants is None:
        return None
    return [q.model_dump(exclude_none=True) for q in quadrants]


def _load_analysis(store: AnalysisStorePort[StoredAnalysis], analysis_id: str) -> StoredAnalysis:
    stored = store.get(analysis_id)
    if stored is None:
        raise ResourceNotFoundError("Analysis", analysis_id)
    return stored


@router.get(
    "/analyze",
    summary="分析接口说明",
)
async def analyze_info(settings: Settings = Depends(get_app_settings)):
    """返回分析接口的使用说明"""
    return {
        "message": "Analysis API endpoint",
        "version": settings.APP_VERSION,
        "endpoints": {
            "POST": "/api/analyze - Submit text for 2x2 matrix analysis",
        },
        "requirements": {
            "text": f"Required. {settings.MIN_TEXT_LENGTH}-{settings.MAX_TEXT_LENGTH:,} characters",
            "files": "Optional. IDs returned by POST /api/files",
            "domain_hint": "Optional. One of: " + ", ".join(d.value for d in Domain),
            "force_axes": "Optional. Custom X/Y axis labels",
            "quadrants": "Optional. Custom quadrant set with boundary rules",
        },
    }


@router.get(
    "/domains",
    response_model=DomainListResponse,
    summary="分析领域列表",
    description="领域 ID 可作为 domain_hint 使用",
)
async def list_domains() -> DomainListResponse:
    """列出可选的分析领域"""
    return DomainListResponse.model_validate({
        "domains": [profile.to_dict() for profile in list_domain_profiles()],
    })


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses=ERROR_RESPONSES,
    summary="矩阵分析",
    description="""
    从文本中选出两个最能区分条目的坐标轴，给出每个条目的坐标，
    并按象限规则分类、生成数据洞察。

    未配置 LLM 或 LLM 调用失败时返回带标记的演示结果（metadata.using_mock_data = true）。
    """
)
def analyze(
    request: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
    file_store: AnalysisStorePort[ProcessedFile] = Depends(get_file_store),
    settings: Settings = Depends(get_app_settings),
) -> AnalysisResponse:
    """执行矩阵分析"""
    text = request.text or ""
    if len(text.strip()) < settings.MIN_TEXT_LENGTH:
        raise ValidationError(
            f"Text content is required and must be at least {settings.MIN_TEXT_LENGTH} characters long",
            field="text",
        )
    if len(text) > settings.MAX_TEXT_LENGTH:
        raise ValidationError(
            f"Text content exceeds maximum length of {settings.MAX_TEXT_LENGTH:,} characters",
            field="text",
        )

    try:
        domain = Domain(request.domain_hint)
    except ValueError:
        raise ValidationError("Invalid domain hint", field="domain_hint")

    files = []
    for file_id in request.files:
        stored_file = file_store.get(file_id)
        if stored_file is None:
            raise ResourceNotFoundError("File", file_id)
        files.append(stored_file)

    content = text
    file_text = combine_file_contents(files)
    if file_text:
        content = f"{text}\n\n{file_text}"

    forced_axes = None
    if request.force_axes:
        forced_axes = ForcedAxes(x=request.force_axes.x, y=request.force_axes.y)

    analysis_id = uuid.uuid4().hex
    try:
        result = orchestrator.run(
            content,
            domain_hint=domain,
            forced_axes=forced_axes,
            custom_quadrants=_quadrant_dicts(request.quadrants),
            request_id=analysis_id,
        )
    except QuadrantSetError as e:
        raise to_quadsight_error(e, field="quadrants")

    result = result.with_metadata(analysis_id=analysis_id)
    stored = StoredAnalysis(
        id=analysis_id,
        domain=domain.value,
        text=text,
        result=result,
        file_ids=tuple(request.files),
    )
    analysis_store.put(analysis_id, stored, created_at=stored.created_at)

    return AnalysisResponse.model_validate(result.to_dict())


@router.get(
    "/analyses",
    response_model=AnalysisListResponse,
    summary="最近的分析记录",
)
async def list_analyses(
    limit: int = Query(default=10, ge=1, le=100, description="最多返回条数"),
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
) -> AnalysisListResponse:
    """按创建时间倒序列出分析记录"""
    analyses = [
        AnalysisSummaryModel.model_validate(stored.summary())
        for stored in analysis_store.list_recent(limit)
    ]
    return AnalysisListResponse(analyses=analyses, count=len(analyses))


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisResponse,
    responses=ERROR_RESPONSES,
    summary="获取分析结果",
)
async def get_analysis(
    analysis_id: str,
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
) -> AnalysisResponse:
    """获取单个分析结果"""
    stored = _load_analysis(analysis_store, analysis_id)
    return AnalysisResponse.model_validate(stored.result.to_dict())


@router.get(
    "/analyses/{analysis_id}/items",
    response_model=ItemTableResponse,
    responses=ERROR_RESPONSES,
    summary="条目表查询",
    description="按名称、理由、引用搜索，按象限过滤，按 name / x / y / confidence / quadrant 排序",
)
async def get_analysis_items(
    analysis_id: str,
    search: Optional[str] = Query(default=None, description="搜索词（不区分大小写）"),
    quadrant: Optional[str] = Query(default=None, description="只返回该象限 ID 的条目"),
    sort: SortField = Query(default=SortField.CONFIDENCE, description="排序字段"),
    order: SortOrderEnum = Query(default=SortOrderEnum.DESC, description="排序方向"),
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
) -> ItemTableResponse:
    """条目表查询"""
    stored = _load_analysis(analysis_store, analysis_id)
    rows = query_items(
        stored.result,
        search=search,
        quadrant_id=quadrant,
        sort_field=sort.value,
        descending=order == SortOrderEnum.DESC,
    )
    return ItemTableResponse.model_validate({
        "items": [row.to_dict() for row in rows],
        "count": len(rows),
    })


@router.get(
    "/analyses/{analysis_id}/chart",
    response_model=ChartResponse,
    responses=ERROR_RESPONSES,
    summary="散点图数据",
)
async def get_analysis_chart(
    analysis_id: str,
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
) -> ChartResponse:
    """散点图数据（颜色按象限规则确定）"""
    result = _load_analysis(analysis_store, analysis_id).result
    return ChartResponse.model_validate({
        "title": f"{result.axes.x_label} vs {result.axes.y_label}",
        "x_label": result.axes.x_label,
        "y_label": result.axes.y_label,
        "points": chart_points(result),
    })


@router.get(
    "/analyses/{analysis_id}/export",
    responses=ERROR_RESPONSES,
    summary="导出分析结果",
    description="支持 json, csv, markdown, html, text",
)
async def export_analysis(
    analysis_id: str,
    format: ExportFormatEnum = Query(default=ExportFormatEnum.JSON, description="导出格式"),
    analysis_store: AnalysisStorePort[StoredAnalysis] = Depends(get_analysis_store),
    report_writer: ReportWriter = Depends(get_report_writer),
) -> Response:
    """导出分析结果"""
    result = _load_analysis(analysis_store, analysis_id).result
    filename = f"analysis-{analysis_id}"

    if format == ExportFormatEnum.JSON:
        return Response(
            content=to_json(result),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}.json"'},
        )
    if format == ExportFormatEnum.CSV:
        return Response(
            content=items_to_csv(result),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
        )
    if format == ExportFormatEnum.HTML:
        return HTMLResponse(content=report_writer.generate(result, ReportFormat.HTML))
    if format == ExportFormatEnum.MARKDOWN:
        return PlainTextResponse(
            content=report_writer.generate(result, ReportFormat.MARKDOWN),
            media_type="text/markdown",
        )
    return PlainTextResponse(content=report_writer.generate(result, ReportFormat.TEXT))


@router.post(
    "/classify",
    response_model=ClassifyResponse,
    responses=ERROR_RESPONSES,
    summary="单点分类",
    description="按象限列表顺序返回第一个规则命中的象限，未命中时 quadrant 为 null",
)
async def classify_point(request: ClassifyRequest) -> ClassifyResponse:
    """单点分类"""
    try:
        point = Point(request.x, request.y)
    except ValueError as e:
        raise ValidationError(str(e), field="x/y")

    try:
        quadrants = build_quadrant_set(
            request.x_label,
            request.y_label,
            _quadrant_dicts(request.quadrants),
        )
    except QuadrantSetError as e:
        raise to_quadsight_error(e, field="quadrants")

    quadrant = classify(point, quadrants)
    if quadrant is None:
        return ClassifyResponse(quadrant=None)
    return ClassifyResponse(quadrant=QuadrantModel.model_validate(quadrant.to_dict()))
