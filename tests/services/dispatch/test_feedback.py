"""
请求中动画控制器测试
"""

import asyncio

import httpx
import pytest

from src.services.dispatch import (
    ActionDispatcher,
    BusyFeedbackController,
    CooldownConfig,
    CooldownTimer,
    DispatchState,
    IndicatorState,
)
from src.services.dispatch.feedback import pulse_at, rotation_at
from src.services.endpoint import ResilientRequestClient


class TestEasing:
    def test_rotation_is_linear_over_period(self) -> None:
        assert rotation_at(0, 1.4) == 0
        assert rotation_at(0.7, 1.4) == pytest.approx(180)
        assert rotation_at(1.4, 1.4) == pytest.approx(0)

    def test_pulse_yoyo(self) -> None:
        assert pulse_at(0, 0.8) == pytest.approx(0)
        assert pulse_at(0.4, 0.8) == pytest.approx(0.5)
        assert pulse_at(0.8, 0.8) == pytest.approx(1)
        assert pulse_at(1.2, 0.8) == pytest.approx(0.5)
        assert pulse_at(1.6, 0.8) == pytest.approx(0)


class TestBusyFeedbackController:
    def test_without_event_loop_nothing_runs(self) -> None:
        controller = BusyFeedbackController()
        controller.on_state(DispatchState.busy())
        assert not controller.is_animating
        assert controller.indicator == IndicatorState()

    @pytest.mark.asyncio
    async def test_animates_only_while_busy(self) -> None:
        frames: list[IndicatorState] = []
        controller = BusyFeedbackController(frame_interval=0.005, on_frame=frames.append)

        controller.on_state(DispatchState.busy())
        assert controller.is_animating
        await asyncio.sleep(0.05)
        assert any(f.rotation_deg > 0 for f in frames)
        assert any(f.glow > 0 for f in frames)

        controller.on_state(DispatchState.cooldown(1000))
        assert not controller.is_animating
        assert controller.indicator == IndicatorState()
        assert frames[-1] == IndicatorState()

        frame_count = len(frames)
        await asyncio.sleep(0.03)
        assert len(frames) == frame_count

    @pytest.mark.asyncio
    async def test_repeated_busy_does_not_stack_tasks(self) -> None:
        controller = BusyFeedbackController(frame_interval=0.01)
        controller.on_state(DispatchState.busy())
        tasks = list(controller._tasks)
        controller.on_state(DispatchState.busy())

        assert controller._tasks == tasks
        controller.close()

    @pytest.mark.asyncio
    async def test_follows_dispatcher_lifecycle(self) -> None:
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json={"image": "data:image/png;base64,QUJD"})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        dispatcher = ActionDispatcher(
            ResilientRequestClient("image", http_client=http_client),
            CooldownConfig(duration_ms=1000, tick_interval_ms=100),
            candidate_provider=lambda: ["http://a.test"],
            timer=CooldownTimer(100, auto_tick=False),
        )
        controller = BusyFeedbackController(frame_interval=0.005)
        controller.attach(dispatcher)
        assert not controller.is_animating

        dispatcher.trigger("data")
        assert controller.is_animating
        await asyncio.sleep(0.02)

        release.set()
        await dispatcher.wait_for_completion()

        assert not controller.is_animating
        assert controller.indicator == IndicatorState()

    @pytest.mark.asyncio
    async def test_close_releases_tasks_and_subscription(self) -> None:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"image": "x"}))
        )
        timer = CooldownTimer(100, auto_tick=False)
        dispatcher = ActionDispatcher(
            ResilientRequestClient("image", http_client=http_client),
            CooldownConfig(duration_ms=100, tick_interval_ms=100),
            candidate_provider=lambda: ["http://a.test"],
            timer=timer,
        )
        controller = BusyFeedbackController(frame_interval=0.005)
        controller.attach(dispatcher)

        dispatcher.trigger("data")
        assert controller.is_animating
        controller.close()
        assert not controller.is_animating

        await dispatcher.wait_for_completion()
        timer.tick()
        # 已取消订阅，之后的 Busy 不再启动动画
        assert dispatcher.trigger("again") is True
        assert not controller.is_animating
        await dispatcher.wait_for_completion()
