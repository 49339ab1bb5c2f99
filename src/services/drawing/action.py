"""
绘图动作装配

按当前配置组装 ResilientRequestClient + ActionDispatcher，供前端宿主（每个 UI 表面一个实例）使用。
"""

from __future__ import annotations

import httpx

from src.config import config
from src.config.constants import EndpointDefaults
from src.core.logger import logger
from src.models.drawing import DrawingMode
from src.services.dispatch.dispatcher import ActionDispatcher, OutcomeCallback
from src.services.dispatch.models import CooldownConfig
from src.services.endpoint.client import ResilientRequestClient
from src.services.endpoint.models import PageOrigin


def create_drawing_client(
    mode: DrawingMode | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ResilientRequestClient:
    mode = mode or DrawingMode.parse(config.drawing_mode)
    response_field = config.drawing_response_field or mode.response_field
    return ResilientRequestClient(
        response_field=response_field,
        http_client=http_client,
        timeout=config.drawing_request_timeout,
    )


def create_drawing_dispatcher(
    page_origin: PageOrigin | None = None,
    on_outcome: OutcomeCallback | None = None,
    mode: DrawingMode | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ActionDispatcher:
    client = create_drawing_client(mode, http_client)
    cooldown = CooldownConfig(
        duration_ms=config.cooldown_ms,
        tick_interval_ms=config.cooldown_tick_ms,
    )
    logger.debug(
        "创建绘图调度器: field={}, cooldown={}ms, origin={}",
        client.response_field,
        cooldown.duration_ms,
        page_origin.origin if page_origin else None,
    )
    return ActionDispatcher(
        client,
        cooldown,
        path=EndpointDefaults.FUNCTION_PATH,
        page_origin=page_origin,
        on_outcome=on_outcome,
    )
