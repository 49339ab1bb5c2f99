"""
应用入口

    gunicorn src.main:app -c gunicorn_conf.py -k uvicorn.workers.UvicornWorker
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from src.api.public.drawing import router as drawing_router
from src.clients.http_client import close_http_clients
from src.config import config
from src.core.logger import logger


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info("AirDraw 服务启动: environment={}, mode={}", config.environment, config.drawing_mode)
    if not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY 未配置，绘图端点将返回 500")
    yield
    await close_http_clients()
    logger.info("AirDraw 服务已关闭")


def create_app() -> FastAPI:
    app = FastAPI(
        title="AirDraw",
        docs_url=None if config.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.include_router(drawing_router)
    return app


app = create_app()
