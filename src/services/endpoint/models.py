"""
端点调用数据模型

定义候选端点调用的核心数据结构：
- PageOrigin: 当前页面的 origin（scheme + host + port）
- AttemptRecord: 单个候选端点的失败记录
- RequestSuccess / RequestFailure: 一次 send 调用的结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union
from urllib.parse import urlsplit

# 候选端点就是一个 origin 字符串，按精确字符串比较去重
EndpointCandidate = str


@dataclass(frozen=True)
class PageOrigin:
    """浏览器上下文中的当前页面 origin（只读）"""

    scheme: str
    host: str
    port: int | None = None

    @property
    def origin(self) -> str:
        if not self.scheme or not self.host:
            return ""
        # IPv6 字面量需要方括号
        host = self.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        if self.port is None:
            return f"{self.scheme}://{host}"
        return f"{self.scheme}://{host}:{self.port}"

    @classmethod
    def from_url(cls, url: str) -> PageOrigin | None:
        """从页面 URL 解析 origin，无法解析时返回 None"""
        if not url or not url.strip():
            return None
        parts = urlsplit(url.strip())
        if not parts.scheme or not parts.hostname:
            return None
        return cls(scheme=parts.scheme, host=parts.hostname, port=parts.port)


@dataclass(frozen=True)
class AttemptRecord:
    candidate: EndpointCandidate
    error: str
    kind: str = "transport"  # transport / protocol
    status_code: int | None = None


@dataclass(frozen=True)
class RequestSuccess:
    """
    成功结果

    value 为期望字段的值（图片 data URL 或文字结果），body 为完整响应体，
    attempts 记录成功之前失败的候选端点。
    """

    candidate: EndpointCandidate
    value: str
    body: dict[str, Any] = field(default_factory=dict)
    attempts: tuple[AttemptRecord, ...] = ()

    ok = True


@dataclass(frozen=True)
class RequestFailure:
    """失败结果，attempts 按候选顺序记录每个端点的失败原因"""

    attempts: tuple[AttemptRecord, ...] = ()
    message: str | None = None

    ok = False

    def describe(self) -> str:
        """诊断用的单行摘要（仅用于日志，不展示给最终用户）"""
        if not self.attempts:
            return self.message or "no endpoint candidates"
        return "; ".join(f"{a.candidate} -> {a.error}" for a in self.attempts)


RequestOutcome = Union[RequestSuccess, RequestFailure]
