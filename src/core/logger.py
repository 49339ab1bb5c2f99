"""
统一日志系统 - 基于 loguru

日志级别策略:
- DEBUG: 候选端点逐个尝试、冷却计时、动画启停
- INFO:  动作触发、请求成功、服务启动/关闭
- WARNING: 候选端点全部失败、上游返回异常
- ERROR: 未预期的异常

输出策略:
- 控制台: 开发环境=DEBUG, 生产环境=INFO (通过 LOG_LEVEL 控制)
- 文件: 设置 LOG_DISABLE_FILE=false 时写入 logs/，按大小轮转

使用方式:
    from src.core.logger import logger

    logger.info("消息")
    logger.debug("候选端点: {}", candidate)
    logger.exception("异常，带堆栈")
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from loguru import logger

# ============================================================================
# 环境检测
# ============================================================================

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG").upper()

# 默认不写文件（前端/测试场景无需落盘）
DISABLE_FILE_LOG = os.getenv("LOG_DISABLE_FILE", "true").lower() == "true"

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# ============================================================================
# 日志格式定义
# ============================================================================

CONSOLE_FORMAT_DEV = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{message}</cyan>"
)

CONSOLE_FORMAT_PROD = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"

# ============================================================================
# 日志配置
# ============================================================================

logger.remove()


def _log_filter(record: dict) -> bool:  # type: ignore[type-arg]
    return "watchfiles" not in record["name"]


logger.add(
    sys.stdout,
    format=CONSOLE_FORMAT_PROD if IS_PRODUCTION else CONSOLE_FORMAT_DEV,
    level=LOG_LEVEL,
    filter=_log_filter,  # type: ignore[arg-type]
    colorize=not IS_PRODUCTION,
    backtrace=not IS_PRODUCTION,
    diagnose=not IS_PRODUCTION,
)

if not DISABLE_FILE_LOG:
    log_dir = PROJECT_ROOT / "logs"
    log_dir.mkdir(exist_ok=True)

    logger.add(  # type: ignore[call-overload]
        log_dir / "airdraw.log",
        level="DEBUG",
        format=FILE_FORMAT,
        filter=_log_filter,
        rotation="50 MB",
        retention="14 days",
        compression="gz",
        enqueue=False,
        encoding="utf-8",
        catch=True,
    )

# ============================================================================
# 禁用第三方库噪音日志
# ============================================================================

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

__all__ = ["logger"]
