"""
文件路由 - 上传文件并提取文本

每个文件独立处理，失败只体现在该文件的 error 字段。
成功的文件会保存，分析请求可通过 files 字段引用其 ID。
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from quadsight.api.dependencies import Settings, get_app_settings, get_file_store, get_process_files
from quadsight.api.schemas import ErrorResponse, FileInfo, FileUploadResponse
from quadsight.infrastructure.errors import ResourceNotFoundError, ValidationError
from quadsight.ports.interfaces import AnalysisStorePort
from quadsight.use_cases import ProcessedFile, ProcessFilesUseCase, UploadedFile


router = APIRouter(prefix="/api/files", tags=["Files"])


async def read_upload(upload: UploadFile, max_bytes: int) -> UploadedFile:
    """
    读取上传文件，最多读取 max_bytes + 1 字节

    超出上限的文件只读到足以判定超限为止，由提取器按大小拒绝。
    """
    data = await upload.read(max_bytes + 1)
    size = upload.size if upload.size is not None else len(data)
    return UploadedFile(
        name=upload.filename or "unnamed",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
        size=size,
    )


@router.post(
    "",
    response_model=FileUploadResponse,
    responses={400: {"model": ErrorResponse, "description": "未提供文件"}},
    summary="上传文件",
    description="支持 TXT、PDF、DOCX、DOC，单个文件不超过 10MB",
)
async def upload_files(
    files: List[UploadFile] = File(..., description="待处理的文件"),
    use_case: ProcessFilesUseCase = Depends(get_process_files),
    file_store: AnalysisStorePort[ProcessedFile] = Depends(get_file_store),
    settings: Settings = Depends(get_app_settings),
) -> FileUploadResponse:
    """上传并提取文件文本"""
    if not files:
        raise ValidationError("No files provided", field="files")

    uploads = []
    for upload in files:
        uploads.append(await read_upload(upload, settings.max_file_bytes))

    results = await run_in_threadpool(use_case.execute, uploads)

    for processed in results:
        if processed.ok:
            file_store.put(processed.id, processed)

    processed_count = sum(1 for r in results if r.ok)
    return FileUploadResponse(
        files=[FileInfo.model_validate(r.to_dict()) for r in results],
        processed=processed_count,
        failed=len(results) - processed_count,
    )


@router.get(
    "/{file_id}",
    response_model=FileInfo,
    responses={404: {"model": ErrorResponse, "description": "文件不存在"}},
    summary="获取已上传文件",
)
async def get_file(
    file_id: str,
    file_store: AnalysisStorePort[ProcessedFile] = Depends(get_file_store),
) -> FileInfo:
    """获取已上传文件（含全文）"""
    processed = file_store.get(file_id)
    if processed is None:
        raise ResourceNotFoundError("File", file_id)
    return FileInfo.model_validate(processed.to_dict(include_content=True))
