"""
候选端点构建

按优先级生成要尝试的服务 origin 列表（纯函数，无网络访问）：
1. 配置中的覆盖 origin
2. 当前页面自身的 origin
3. 当前页面位于回环地址时，追加本地开发端口（每个端口两种回环写法）
"""

from __future__ import annotations

from typing import Iterable, Sequence

from src.config import config
from src.config.constants import EndpointDefaults
from src.services.endpoint.models import EndpointCandidate, PageOrigin


def _is_loopback(host: str | None) -> bool:
    return bool(host) and host in EndpointDefaults.LOOPBACK_HOSTS


def _local_origins(ports: Iterable[int]) -> list[str]:
    origins: list[str] = []
    for port in ports:
        for host in EndpointDefaults.LOOPBACK_HOSTS:
            origins.append(f"http://{host}:{port}")
    return origins


def build_endpoint_candidates(
    override_origin: str | None,
    page_origin: PageOrigin | None,
    local_ports: Sequence[int] = EndpointDefaults.LOCAL_FUNCTION_PORTS,
) -> list[EndpointCandidate]:
    """
    生成有序、去重的候选 origin 列表

    Args:
        override_origin: 外部配置的覆盖 origin，可为空
        page_origin: 当前页面 origin，不在浏览器上下文时为 None
        local_ports: 本地开发端口，按优先级排列

    Returns:
        候选 origin 列表，可能为空
    """
    ordered: list[str | None] = [override_origin]

    if page_origin is not None:
        ordered.append(page_origin.origin)
        if _is_loopback(page_origin.host):
            ordered.extend(_local_origins(local_ports))

    candidates: list[EndpointCandidate] = []
    seen: set[str] = set()
    for origin in ordered:
        if not origin or not origin.strip():
            continue
        origin = origin.strip()
        if origin in seen:
            continue
        seen.add(origin)
        candidates.append(origin)
    return candidates


def resolve_endpoint_candidates(
    page_origin: PageOrigin | None,
    local_ports: Sequence[int] = EndpointDefaults.LOCAL_FUNCTION_PORTS,
) -> list[EndpointCandidate]:
    """使用当前配置（调用时读取覆盖 origin）生成候选列表"""
    return build_endpoint_candidates(config.api_origin_override, page_origin, local_ports)
