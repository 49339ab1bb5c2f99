"""
多端点容错请求客户端

按顺序对每个候选 origin 发起一次 POST，直到某个端点成功或全部失败：
- 传输失败（连接失败、DNS、超时）与协议失败（非 2xx、响应体不是 JSON、缺少期望字段）
  一视同仁，记录后尝试下一个候选，不对同一候选重试
- 首个成功立即返回，后续候选不再请求
- 候选列表为空时直接返回失败，不发起任何请求

本组件无内部状态，每次调用相互独立。
"""

from __future__ import annotations

import base64
import json
from typing import Any, Sequence

import httpx

from src.clients.http_client import HTTPClientPool
from src.core.error_utils import extract_error_message
from src.core.exceptions import CandidateAttemptError, ProtocolError, TransportError
from src.core.logger import logger
from src.services.endpoint.models import (
    AttemptRecord,
    EndpointCandidate,
    RequestFailure,
    RequestOutcome,
    RequestSuccess,
)

# 上游错误响应写入诊断信息时的最大长度
_MAX_ERROR_BODY = 300


def build_endpoint_url(origin: str, path: str) -> str:
    base = origin.rstrip("/")
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base}{path}"


def _coerce_payload(payload: str | bytes) -> str:
    """
    bytes 载荷转为 imageData 字符串

    UTF-8 文本（data URL 或 base64）原样使用；原始图片字节编码为 PNG data URL
    """
    if not isinstance(payload, bytes):
        return payload
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        encoded = base64.b64encode(payload).decode("ascii")
        return f"data:image/png;base64,{encoded}"


class ResilientRequestClient:
    """
    顺序尝试候选端点的请求客户端

    Args:
        response_field: 成功响应中期望的字段名（enhance 模式为 image，analyze 模式为 result）
        http_client: 注入的 httpx.AsyncClient，为 None 时使用全局客户端池
        timeout: 单个候选请求的超时（秒），为 None 时使用客户端默认超时
    """

    def __init__(
        self,
        response_field: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        if not response_field:
            raise ValueError("response_field 不能为空")
        self.response_field = response_field
        self._http_client = http_client
        self.timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await HTTPClientPool.get_default_client_async()

    async def send(
        self,
        candidates: Sequence[EndpointCandidate],
        path: str,
        payload: str | bytes,
    ) -> RequestOutcome:
        """
        依次尝试候选端点

        Args:
            candidates: 有序候选 origin
            path: 固定的服务路径
            payload: 图片数据（base64 或 data URL）

        Returns:
            RequestSuccess 或携带完整尝试日志的 RequestFailure
        """
        if not candidates:
            logger.warning("绘图服务无可用候选端点，跳过请求")
            return RequestFailure(attempts=(), message="no endpoint candidates")

        body = {"imageData": _coerce_payload(payload)}
        client = await self._get_client()
        attempts: list[AttemptRecord] = []

        for candidate in candidates:
            try:
                data, value = await self._attempt(client, candidate, path, body)
            except CandidateAttemptError as exc:
                record = AttemptRecord(
                    candidate=candidate,
                    error=extract_error_message(exc),
                    kind=exc.kind,
                    status_code=exc.status_code,
                )
                attempts.append(record)
                logger.debug("候选端点失败 [{}] {}: {}", record.kind, candidate, record.error)
                continue

            if attempts:
                logger.info("候选端点 {} 请求成功（此前失败 {} 个）", candidate, len(attempts))
            else:
                logger.debug("候选端点 {} 请求成功", candidate)
            return RequestSuccess(
                candidate=candidate,
                value=value,
                body=data,
                attempts=tuple(attempts),
            )

        failure = RequestFailure(attempts=tuple(attempts), message="all endpoint candidates failed")
        logger.warning("绘图服务候选端点全部失败 ({} 个): {}", len(attempts), failure.describe())
        return failure

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        candidate: EndpointCandidate,
        path: str,
        body: dict[str, Any],
    ) -> tuple[dict[str, Any], str]:
        url = build_endpoint_url(candidate, path)
        request_kwargs: dict[str, Any] = {"json": body}
        if self.timeout is not None:
            request_kwargs["timeout"] = self.timeout

        try:
            response = await client.post(url, **request_kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(candidate, f"timeout: {str(exc) or type(exc).__name__}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(candidate, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise ProtocolError(
                candidate,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                upstream_response=response.text[:_MAX_ERROR_BODY],
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProtocolError(
                candidate,
                "response body is not valid JSON",
                status_code=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise ProtocolError(
                candidate,
                "response body is not a JSON object",
                status_code=response.status_code,
            )

        value = data.get(self.response_field)
        if not isinstance(value, str) or not value.strip():
            raise ProtocolError(
                candidate,
                f"missing or malformed field '{self.response_field}'",
                status_code=response.status_code,
            )
        return data, value
