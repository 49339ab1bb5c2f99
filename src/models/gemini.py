"""
Google Gemini generateContent 请求/响应模型

只定义绘图服务需要的字段，其余字段宽松透传
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseModelWithExtras(BaseModel):
    """允许额外字段的基础模型"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# 请求模型
# ---------------------------------------------------------------------------


class GeminiContent(BaseModelWithExtras):
    """
    Gemini 消息内容

    parts 接受任意字典列表，如 {"text": ...} 或 {"inlineData": {"mimeType": ..., "data": ...}}
    """

    role: str | None = None
    parts: list[dict[str, Any]]


class GeminiRequest(BaseModelWithExtras):
    contents: list[GeminiContent]
    generation_config: dict[str, Any] | None = Field(default=None, alias="generationConfig")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# 响应模型
# ---------------------------------------------------------------------------


class GeminiInlineData(BaseModelWithExtras):
    mime_type: str | None = Field(default=None, alias="mimeType")
    data: str | None = None


class GeminiPart(BaseModelWithExtras):
    text: str | None = None
    inline_data: GeminiInlineData | None = Field(default=None, alias="inlineData")


class GeminiCandidateContent(BaseModelWithExtras):
    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(BaseModelWithExtras):
    content: GeminiCandidateContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GeminiUsageMetadata(BaseModelWithExtras):
    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    total_token_count: int = Field(default=0, alias="totalTokenCount")


class GeminiResponse(BaseModelWithExtras):
    candidates: list[GeminiCandidate] = Field(default_factory=list)
    usage_metadata: GeminiUsageMetadata | None = Field(default=None, alias="usageMetadata")

    def _first_parts(self) -> list[GeminiPart]:
        if not self.candidates or self.candidates[0].content is None:
            return []
        return self.candidates[0].content.parts

    def first_inline_data(self) -> GeminiInlineData | None:
        """第一个候选中带数据的 inlineData"""
        for part in self._first_parts():
            if part.inline_data is not None and part.inline_data.data:
                return part.inline_data
        return None

    def text(self) -> str:
        """拼接第一个候选中的全部文字"""
        return "".join(part.text for part in self._first_parts() if part.text).strip()
