"""
绘图服务请求/响应模型

服务端点: POST /.netlify/functions/analyze-drawing
- 请求: {"imageData": "<base64 或 data URL>"}
- enhance 模式响应: {"image": "data:<mime>;base64,<data>"}
- analyze 模式响应: {"result": "<文字描述>"}
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DrawingMode(str, Enum):
    """动作模式"""

    ENHANCE = "enhance"  # 草图 -> 成品图
    ANALYZE = "analyze"  # 草图 -> 文字描述

    @property
    def response_field(self) -> str:
        """成功响应中期望的字段名"""
        return "image" if self is DrawingMode.ENHANCE else "result"

    @classmethod
    def parse(cls, value: str | None) -> DrawingMode:
        try:
            return cls((value or cls.ENHANCE.value).strip().lower())
        except ValueError:
            raise ValueError(f"不支持的绘图模式: {value}") from None


class DrawingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_data: str | None = Field(default=None, alias="imageData")


class EnhanceResponse(BaseModel):
    """enhance 模式成功响应"""

    image: str


class AnalyzeResponse(BaseModel):
    """analyze 模式成功响应"""

    result: str


class DrawingErrorResponse(BaseModel):
    """400 / 405 / 500 错误响应"""

    error: str
    message: str | None = None
