"""
冷却门控的动作调度器

将一次用户触发转换为受控的请求生命周期：

    Idle --trigger--> Busy --完成(成功/失败)--> Cooldown(remaining) --倒计时--> Idle

- Busy / Cooldown 期间的 trigger 为空操作（不发请求、不重置冷却）
- 请求在事件循环上异步执行，调用方不被阻塞，状态是唯一的进度指示
- 无论成功、协议失败、全部候选失败还是未预期异常，Busy 都会转入 Cooldown
- 同一实例任意时刻最多一个在途请求（单线程下由 Busy 门控保证，无需锁）
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Sequence

from src.config.constants import EndpointDefaults
from src.core.error_utils import extract_error_message
from src.core.logger import logger
from src.services.dispatch.cooldown import CooldownTimer
from src.services.dispatch.models import CooldownConfig, DispatchPhase, DispatchState
from src.services.endpoint.candidates import resolve_endpoint_candidates
from src.services.endpoint.client import ResilientRequestClient
from src.services.endpoint.models import (
    EndpointCandidate,
    PageOrigin,
    RequestFailure,
    RequestOutcome,
)

StateListener = Callable[[DispatchState], None]
OutcomeCallback = Callable[[RequestOutcome], Any]


class ActionDispatcher:
    """
    动作调度器

    Args:
        client: 多端点容错请求客户端
        cooldown: 冷却配置
        path: 服务路径
        page_origin: 当前页面 origin，用于生成候选端点
        candidate_provider: 自定义候选端点来源，提供时忽略 page_origin
        on_outcome: 请求完成后的结果回调（同步或异步）
        timer: 自定义冷却计时器（需与 cooldown.tick_interval_ms 一致）
    """

    def __init__(
        self,
        client: ResilientRequestClient,
        cooldown: CooldownConfig | None = None,
        *,
        path: str = EndpointDefaults.FUNCTION_PATH,
        page_origin: PageOrigin | None = None,
        candidate_provider: Callable[[], Sequence[EndpointCandidate]] | None = None,
        on_outcome: OutcomeCallback | None = None,
        timer: CooldownTimer | None = None,
    ) -> None:
        self._client = client
        self.cooldown = cooldown or CooldownConfig()
        self.path = path
        self.page_origin = page_origin
        self._candidate_provider = candidate_provider
        self._on_outcome = on_outcome

        self._state = DispatchState.idle()
        self._listeners: list[StateListener] = []
        self._task: asyncio.Task | None = None
        self.last_outcome: RequestOutcome | None = None

        self._timer = timer or CooldownTimer(self.cooldown.tick_interval_ms)
        self._timer.bind(on_tick=self._handle_tick, on_expired=self._handle_expired)

    # ------------------------------------------------------------------
    # 状态
    # ------------------------------------------------------------------

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def phase(self) -> DispatchPhase:
        return self._state.phase

    @property
    def remaining_ms(self) -> int:
        return self._state.remaining_ms

    @property
    def can_trigger(self) -> bool:
        return self._state.is_idle

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        订阅状态变化

        Returns:
            取消订阅函数
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: DispatchState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("调度状态监听器执行失败")

    # ------------------------------------------------------------------
    # 触发
    # ------------------------------------------------------------------

    def trigger(self, payload: str | bytes) -> bool:
        """
        触发一次动作（必须在事件循环中调用）

        Returns:
            True 表示已受理；False 表示因请求中或冷却中被忽略
        """
        if not self._state.is_idle:
            logger.debug(
                "动作已忽略: phase={}, 剩余 {}s",
                self._state.phase.value,
                self._state.remaining_seconds,
            )
            return False

        loop = asyncio.get_running_loop()
        self._set_state(DispatchState.busy())
        self._task = loop.create_task(self._run(payload))
        logger.info("动作已触发")
        return True

    async def wait_for_completion(self) -> RequestOutcome | None:
        """等待当前在途请求完成（无在途请求时立即返回上次结果）"""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
        return self.last_outcome

    def _resolve_candidates(self) -> list[EndpointCandidate]:
        if self._candidate_provider is not None:
            return list(self._candidate_provider())
        return resolve_endpoint_candidates(self.page_origin)

    async def _run(self, payload: str | bytes) -> None:
        try:
            candidates = self._resolve_candidates()
            outcome = await self._client.send(candidates, self.path, payload)
        except asyncio.CancelledError:
            self._set_state(DispatchState.idle())
            raise
        except Exception as exc:
            logger.exception("动作请求出现未预期异常")
            outcome = RequestFailure(attempts=(), message=extract_error_message(exc))

        self._complete(outcome)
        await self._deliver(outcome)

    def _complete(self, outcome: RequestOutcome) -> None:
        self.last_outcome = outcome
        duration = self.cooldown.duration_ms
        self._set_state(DispatchState.cooldown(duration))
        self._timer.arm(duration)
        if outcome.ok:
            logger.info("动作完成: 成功 ({})", outcome.candidate)
        else:
            logger.info("动作完成: 失败，进入冷却 {}ms", duration)

    async def _deliver(self, outcome: RequestOutcome) -> None:
        if self._on_outcome is None:
            return
        try:
            result = self._on_outcome(outcome)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("动作结果回调执行失败")

    # ------------------------------------------------------------------
    # 冷却回调
    # ------------------------------------------------------------------

    def _handle_tick(self, remaining_ms: int) -> None:
        if self._state.phase is DispatchPhase.COOLDOWN and remaining_ms > 0:
            self._set_state(DispatchState.cooldown(remaining_ms))

    def _handle_expired(self) -> None:
        if self._state.phase is DispatchPhase.COOLDOWN:
            self._set_state(DispatchState.idle())

    # ------------------------------------------------------------------
    # 销毁
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """释放定时任务并取消在途请求"""
        self._timer.cancel()
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._set_state(DispatchState.idle())
        self._listeners.clear()
