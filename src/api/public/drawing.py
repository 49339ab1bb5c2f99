"""
绘图服务公共 API

前端绘图面板通过候选端点调用这里的唯一 POST 端点。
Gemini API Key 只在服务端使用，不会暴露给浏览器。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.config import config
from src.config.constants import EndpointDefaults
from src.core.error_utils import extract_client_error_message, extract_error_message
from src.core.exceptions import AirDrawException, InvalidRequestException
from src.core.logger import logger
from src.models.drawing import (
    AnalyzeResponse,
    DrawingErrorResponse,
    DrawingMode,
    DrawingRequest,
    EnhanceResponse,
)
from src.services.drawing.gemini_service import GeminiDrawingService

router = APIRouter(tags=["Drawing"])


def get_drawing_service() -> GeminiDrawingService:
    return GeminiDrawingService()


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = DrawingErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _resolve_mode(mode: str | None) -> DrawingMode:
    try:
        return DrawingMode.parse(mode or config.drawing_mode)
    except ValueError as exc:
        raise InvalidRequestException(str(exc)) from exc


async def _parse_image_data(request: Request) -> str:
    try:
        raw = await request.json()
    except ValueError:
        raw = {}
    if not isinstance(raw, dict):
        raw = {}
    try:
        body = DrawingRequest.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRequestException("imageData must be a string") from exc
    if not body.image_data or not body.image_data.strip():
        raise InvalidRequestException("No image data provided")
    return body.image_data


_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": DrawingErrorResponse},
    500: {"model": DrawingErrorResponse},
}


@router.post(
    EndpointDefaults.FUNCTION_PATH,
    response_model=EnhanceResponse | AnalyzeResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_drawing(
    request: Request,
    mode: str | None = Query(default=None, description="enhance 或 analyze，默认读取配置"),
    service: GeminiDrawingService = Depends(get_drawing_service),
) -> JSONResponse:
    """
    处理草图

    **请求体**
    - imageData: base64 图片数据，可带 data:image/png;base64, 前缀

    **返回字段**
    - image: enhance 模式下的成品图 data URL
    - result: analyze 模式下的文字描述
    """
    try:
        drawing_mode = _resolve_mode(mode)
        image_data = await _parse_image_data(request)
    except InvalidRequestException as exc:
        return _error(exc.status_code or 400, exc.message)

    try:
        result = await service.process(image_data, drawing_mode)
    except AirDrawException as exc:
        logger.warning("绘图处理失败 [{}]: {}", drawing_mode.value, extract_error_message(exc))
        return _error(500, "Failed to analyze drawing", extract_client_error_message(exc))
    except Exception as exc:
        logger.exception("绘图处理出现未预期异常 [{}]", drawing_mode.value)
        return _error(500, "Failed to analyze drawing", extract_client_error_message(exc))

    logger.info("绘图处理完成: mode={}", drawing_mode.value)
    return JSONResponse(status_code=200, content=result.model_dump())


@router.api_route(
    EndpointDefaults.FUNCTION_PATH,
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def analyze_drawing_method_not_allowed() -> JSONResponse:
    return _error(405, "Method not allowed")
