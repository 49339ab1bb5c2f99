"""
绘图服务端点模块

- build_endpoint_candidates / resolve_endpoint_candidates: 候选 origin 构建
- ResilientRequestClient: 多端点顺序容错请求
"""

from src.services.endpoint.candidates import (
    build_endpoint_candidates,
    resolve_endpoint_candidates,
)
from src.services.endpoint.client import ResilientRequestClient, build_endpoint_url
from src.services.endpoint.models import (
    AttemptRecord,
    EndpointCandidate,
    PageOrigin,
    RequestFailure,
    RequestOutcome,
    RequestSuccess,
)

__all__ = [
    "AttemptRecord",
    "EndpointCandidate",
    "PageOrigin",
    "RequestFailure",
    "RequestOutcome",
    "RequestSuccess",
    "ResilientRequestClient",
    "build_endpoint_candidates",
    "build_endpoint_url",
    "resolve_endpoint_candidates",
]
