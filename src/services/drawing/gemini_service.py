"""
Gemini 绘图服务

通过 Gemini REST generateContent 接口处理草图：
- enhance: 返回成品图（data URL）
- analyze: 返回文字描述

API Key 只保存在服务端，前端永远只调用本服务的绘图端点。
"""

from __future__ import annotations

import re

import httpx
from pydantic import ValidationError

from src.clients.http_client import HTTPClientPool
from src.config import config
from src.config.constants import GeminiDefaults
from src.core.exceptions import UpstreamServiceException
from src.core.logger import logger
from src.models.drawing import AnalyzeResponse, DrawingMode, EnhanceResponse
from src.models.gemini import GeminiContent, GeminiRequest, GeminiResponse

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpeg);base64,")

# 上游错误响应写入日志时的最大长度
_MAX_ERROR_BODY = 500


def strip_data_url_prefix(image_data: str) -> str:
    return _DATA_URL_PREFIX.sub("", image_data)


def build_generate_content_url(base_url: str, model: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/v1beta"):
        base = base[: -len("/v1beta")]
    return f"{base}/v1beta/models/{model}:generateContent"


class GeminiDrawingService:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.gemini_api_key
        self.base_url = base_url or config.gemini_base_url
        self._http_client = http_client

    def model_for(self, mode: DrawingMode) -> str:
        if mode is DrawingMode.ENHANCE:
            return config.gemini_enhance_model
        return config.gemini_analyze_model

    def build_request(self, image_data: str, mode: DrawingMode) -> GeminiRequest:
        prompt = (
            GeminiDefaults.ENHANCE_PROMPT
            if mode is DrawingMode.ENHANCE
            else GeminiDefaults.ANALYZE_PROMPT
        )
        generation_config = (
            {"responseModalities": ["TEXT", "IMAGE"]} if mode is DrawingMode.ENHANCE else None
        )
        return GeminiRequest(
            contents=[
                GeminiContent(
                    role="user",
                    parts=[
                        {
                            "inlineData": {
                                "mimeType": "image/png",
                                "data": strip_data_url_prefix(image_data),
                            }
                        },
                        {"text": prompt},
                    ],
                )
            ],
            generationConfig=generation_config,
        )

    async def _generate(self, image_data: str, mode: DrawingMode) -> GeminiResponse:
        if not self.api_key:
            raise UpstreamServiceException("GEMINI_API_KEY 未配置")

        model = self.model_for(mode)
        url = build_generate_content_url(self.base_url, model)
        payload = self.build_request(image_data, mode).to_payload()
        client = self._http_client or await HTTPClientPool.get_default_client_async()

        try:
            response = await client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as exc:
            raise UpstreamServiceException(f"Gemini 请求失败: {exc!r}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Gemini 返回错误: model={}, status={}", model, response.status_code
            )
            raise UpstreamServiceException(
                f"Gemini returned HTTP {response.status_code}",
                status_code=response.status_code,
                upstream_response=response.text[:_MAX_ERROR_BODY],
            )

        try:
            return GeminiResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamServiceException("Gemini 响应格式无法解析") from exc

    async def enhance(self, image_data: str) -> str:
        """草图 -> 成品图 data URL"""
        result = await self._generate(image_data, DrawingMode.ENHANCE)
        inline = result.first_inline_data()
        if inline is None or not inline.data:
            raise UpstreamServiceException("Gemini did not return an image payload")
        return f"data:{inline.mime_type or 'image/png'};base64,{inline.data}"

    async def analyze(self, image_data: str) -> str:
        """草图 -> 文字描述"""
        result = await self._generate(image_data, DrawingMode.ANALYZE)
        text = result.text()
        if not text:
            raise UpstreamServiceException("Gemini did not return a text result")
        return text

    async def process(
        self, image_data: str, mode: DrawingMode
    ) -> EnhanceResponse | AnalyzeResponse:
        """按模式处理，返回绘图端点的响应体"""
        if mode is DrawingMode.ENHANCE:
            return EnhanceResponse(image=await self.enhance(image_data))
        return AnalyzeResponse(result=await self.analyze(image_data))
