"""
应用配置

所有配置项从环境变量读取，模块导入时加载一次。
例外：DRAWING_API_ORIGIN 在每次访问时重新读取，便于运行期切换上游。
"""

from __future__ import annotations

import os

from src.config.constants import DispatchDefaults, GeminiDefaults


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


class Config:
    def __init__(self) -> None:
        self.environment = os.getenv("ENVIRONMENT", "development")

        # HTTP 客户端池
        self.http_connect_timeout = float(os.getenv("HTTP_CONNECT_TIMEOUT", "10.0"))
        self.http_read_timeout = float(os.getenv("HTTP_READ_TIMEOUT", "120.0"))
        self.http_write_timeout = float(os.getenv("HTTP_WRITE_TIMEOUT", "30.0"))
        self.http_pool_timeout = float(os.getenv("HTTP_POOL_TIMEOUT", "10.0"))
        self.http_max_connections = int(os.getenv("HTTP_MAX_CONNECTIONS", "100"))
        self.http_keepalive_connections = int(os.getenv("HTTP_KEEPALIVE_CONNECTIONS", "20"))
        self.http_keepalive_expiry = float(os.getenv("HTTP_KEEPALIVE_EXPIRY", "30.0"))

        # 动作调度
        self.cooldown_ms = int(os.getenv("ACTION_COOLDOWN_MS", str(DispatchDefaults.COOLDOWN_MS)))
        self.cooldown_tick_ms = int(
            os.getenv("ACTION_COOLDOWN_TICK_MS", str(DispatchDefaults.TICK_INTERVAL_MS))
        )
        # 单个候选端点的请求超时（秒），未设置时使用客户端池默认超时
        self.drawing_request_timeout = _optional_float("DRAWING_REQUEST_TIMEOUT")

        # 动作模式: enhance 返回图片, analyze 返回文字
        self.drawing_mode = os.getenv("DRAWING_MODE", "enhance").strip().lower()
        # 期望的响应字段，留空则按模式推导（enhance -> image, analyze -> result）
        self.drawing_response_field = os.getenv("DRAWING_RESPONSE_FIELD", "").strip() or None

        # Gemini 上游
        self.gemini_api_key = os.getenv("GEMINI_API_KEY", "")
        self.gemini_base_url = os.getenv("GEMINI_BASE_URL", GeminiDefaults.BASE_URL)
        self.gemini_analyze_model = os.getenv("GEMINI_ANALYZE_MODEL", GeminiDefaults.ANALYZE_MODEL)
        self.gemini_enhance_model = os.getenv("GEMINI_ENHANCE_MODEL", GeminiDefaults.ENHANCE_MODEL)

    @property
    def api_origin_override(self) -> str | None:
        """覆盖的服务 origin（每次访问重新读取环境变量）"""
        value = os.getenv("DRAWING_API_ORIGIN", "").strip()
        return value or None

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


config = Config()
