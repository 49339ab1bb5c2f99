"""
请求中动画控制器

仅在调度器处于 Busy 时运行两个可取消的循环动画：
- 旋转: 0 -> 360 度线性循环，周期 1.4s
- 脉冲: 光晕强度 0 -> 1 -> 0 往返，sine in/out，单程 0.8s

离开 Busy（或销毁）时取消两个动画并把指示器恢复到静止值。
本组件只观察调度状态，不会修改它。
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable

from src.core.logger import logger
from src.services.dispatch.models import DispatchPhase, DispatchState

if TYPE_CHECKING:
    from src.services.dispatch.dispatcher import ActionDispatcher


@dataclass
class IndicatorState:
    """指示器的可动画属性"""

    rotation_deg: float = 0.0
    glow: float = 0.0


REST_INDICATOR = IndicatorState()


def rotation_at(elapsed: float, period: float) -> float:
    return (elapsed % period) / period * 360.0


def pulse_at(elapsed: float, half_period: float) -> float:
    """往返的 sine in/out 缓动，返回 0..1"""
    position = (elapsed % (2 * half_period)) / half_period
    progress = position if position <= 1 else 2 - position
    return (1 - math.cos(math.pi * progress)) / 2


class BusyFeedbackController:
    ROTATION_PERIOD_S = 1.4
    PULSE_HALF_PERIOD_S = 0.8

    def __init__(
        self,
        frame_interval: float = 1 / 60,
        on_frame: Callable[[IndicatorState], None] | None = None,
    ) -> None:
        self.frame_interval = frame_interval
        self._on_frame = on_frame
        self.indicator = replace(REST_INDICATOR)
        self._tasks: list[asyncio.Task] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_animating(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def attach(self, dispatcher: ActionDispatcher) -> None:
        """订阅调度器状态，并按当前状态立即同步一次"""
        self.detach()
        self._unsubscribe = dispatcher.subscribe(self.on_state)
        self.on_state(dispatcher.state)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_state(self, state: DispatchState) -> None:
        if state.phase is DispatchPhase.BUSY:
            self._start()
        else:
            self._stop()

    def close(self) -> None:
        """销毁：取消订阅并释放动画任务"""
        self.detach()
        self._stop()

    def _start(self) -> None:
        if self.is_animating:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("无事件循环，跳过请求中动画")
            return
        self._tasks = [
            loop.create_task(self._rotate(loop)),
            loop.create_task(self._pulse(loop)),
        ]
        logger.debug("请求中动画已启动")

    def _stop(self) -> None:
        if self._tasks:
            for task in self._tasks:
                task.cancel()
            self._tasks = []
            logger.debug("请求中动画已停止")
        if self.indicator != REST_INDICATOR:
            self.indicator = replace(REST_INDICATOR)
            self._emit()

    def _emit(self) -> None:
        if self._on_frame is not None:
            self._on_frame(replace(self.indicator))

    async def _rotate(self, loop: asyncio.AbstractEventLoop) -> None:
        started = loop.time()
        while True:
            self.indicator.rotation_deg = rotation_at(loop.time() - started, self.ROTATION_PERIOD_S)
            self._emit()
            await asyncio.sleep(self.frame_interval)

    async def _pulse(self, loop: asyncio.AbstractEventLoop) -> None:
        started = loop.time()
        while True:
            self.indicator.glow = pulse_at(loop.time() - started, self.PULSE_HALF_PERIOD_S)
            self._emit()
            await asyncio.sleep(self.frame_interval)
