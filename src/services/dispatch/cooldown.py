"""
冷却计时器

状态: Inactive / Active(remaining)
- arm(duration): 进入 Active，重复 arm 只重置剩余时间，不叠加
- tick(): 扣减一个 tick 间隔，归零时回到 Inactive 并触发一次 on_expired

存在运行中的事件循环时，arm 会在该循环上调度周期性 tick 任务；
否则由调用方手动调用 tick()。
"""

from __future__ import annotations

import asyncio
from typing import Callable

from src.core.logger import logger


class CooldownTimer:
    def __init__(
        self,
        tick_interval_ms: int,
        on_tick: Callable[[int], None] | None = None,
        on_expired: Callable[[], None] | None = None,
        auto_tick: bool = True,
    ) -> None:
        if tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms 必须大于 0")
        self.tick_interval_ms = tick_interval_ms
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._auto_tick = auto_tick
        self._remaining_ms = 0
        self._active = False
        self._task: asyncio.Task | None = None

    def bind(
        self,
        on_tick: Callable[[int], None] | None = None,
        on_expired: Callable[[], None] | None = None,
    ) -> None:
        """设置回调（供拥有者在构造后注入）"""
        self._on_tick = on_tick
        self._on_expired = on_expired

    @property
    def remaining_ms(self) -> int:
        return self._remaining_ms

    @property
    def is_active(self) -> bool:
        return self._active

    def arm(self, duration_ms: int) -> None:
        if duration_ms <= 0:
            raise ValueError("duration_ms 必须大于 0")
        self._remaining_ms = duration_ms
        self._active = True
        logger.debug("冷却开始: {}ms", duration_ms)
        if self._auto_tick:
            self._ensure_ticking()

    def tick(self) -> bool:
        """
        推进一个 tick

        Returns:
            本次 tick 是否导致冷却结束
        """
        if not self._active:
            return False

        self._remaining_ms = max(0, self._remaining_ms - self.tick_interval_ms)
        if self._on_tick is not None:
            self._on_tick(self._remaining_ms)

        if self._remaining_ms > 0:
            return False

        self._active = False
        logger.debug("冷却结束")
        if self._on_expired is not None:
            self._on_expired()
        return True

    def cancel(self) -> None:
        """停止计时（不触发 on_expired），用于拥有者销毁时释放定时任务"""
        self._active = False
        self._remaining_ms = 0
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _ensure_ticking(self) -> None:
        if self._task is not None and not self._task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 没有事件循环时由调用方手动 tick
            return
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        interval = self.tick_interval_ms / 1000
        while self._active:
            await asyncio.sleep(interval)
            self.tick()
