"""
SSL 上下文工具
"""

from __future__ import annotations

import ssl
from functools import lru_cache

import certifi


@lru_cache(maxsize=1)
def get_ssl_context() -> ssl.SSLContext:
    """使用 certifi 证书构建共享 SSL 上下文"""
    return ssl.create_default_context(cafile=certifi.where())
