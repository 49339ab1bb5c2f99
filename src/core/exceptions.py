"""
异常定义

- CandidateAttemptError: 单个候选端点的失败（传输/协议），由 ResilientRequestClient 内部消化
- InvalidRequestException: 客户端请求体不合法
- UpstreamServiceException: Gemini 上游调用失败
"""

from __future__ import annotations


class AirDrawException(Exception):
    """项目异常基类"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CandidateAttemptError(AirDrawException):
    """单个候选端点尝试失败"""

    kind = "attempt"

    def __init__(
        self,
        candidate: str,
        message: str,
        status_code: int | None = None,
        upstream_response: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.candidate = candidate
        self.upstream_response = upstream_response


class TransportError(CandidateAttemptError):
    """网络层失败：连接失败、DNS 解析失败、超时"""

    kind = "transport"


class ProtocolError(CandidateAttemptError):
    """协议层失败：非 2xx 状态码、响应体不是 JSON、缺少期望字段"""

    kind = "protocol"


class InvalidRequestException(AirDrawException):
    """请求参数错误"""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400)


class UpstreamServiceException(AirDrawException):
    """上游模型服务错误"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        upstream_response: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.upstream_response = upstream_response
