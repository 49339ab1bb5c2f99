"""
动作调度器测试

覆盖：
- Busy / Cooldown 门控（最多一个在途请求）
- 完成后无条件进入 Cooldown，倒计时结束回到 Idle
- 结果回调与状态订阅
"""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from src.services.dispatch import (
    ActionDispatcher,
    CooldownConfig,
    CooldownTimer,
    DispatchPhase,
    DispatchState,
)
from src.services.endpoint import (
    PageOrigin,
    RequestFailure,
    RequestSuccess,
    ResilientRequestClient,
)

CANDIDATES = ["http://a.test", "http://b.test", "http://c.test"]
COOLDOWN = CooldownConfig(duration_ms=1000, tick_interval_ms=100)


def _dispatcher(handler, **kwargs) -> tuple[ActionDispatcher, CooldownTimer]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = ResilientRequestClient("image", http_client=http_client)
    timer = CooldownTimer(COOLDOWN.tick_interval_ms, auto_tick=False)
    kwargs.setdefault("candidate_provider", lambda: CANDIDATES)
    dispatcher = ActionDispatcher(client, COOLDOWN, timer=timer, **kwargs)
    return dispatcher, timer


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"image": "data:image/png;base64,QUJD"})


class TestActionDispatcherGating:
    @pytest.mark.asyncio
    async def test_initial_state_is_idle(self) -> None:
        dispatcher, _ = _dispatcher(_ok)
        assert dispatcher.state == DispatchState.idle()
        assert dispatcher.can_trigger

    @pytest.mark.asyncio
    async def test_trigger_enters_busy_without_blocking(self) -> None:
        dispatcher, _ = _dispatcher(_ok)

        assert dispatcher.trigger("data") is True
        assert dispatcher.phase is DispatchPhase.BUSY

        await dispatcher.wait_for_completion()
        assert dispatcher.phase is DispatchPhase.COOLDOWN

    @pytest.mark.asyncio
    async def test_second_trigger_while_busy_is_noop(self) -> None:
        """同一 tick 内连续触发两次：第二次不会产生网络请求"""
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            return _ok(request)

        dispatcher, _ = _dispatcher(handler)

        assert dispatcher.trigger("first") is True
        assert dispatcher.trigger("second") is False
        await dispatcher.wait_for_completion()

        assert calls == ["a.test"]

    @pytest.mark.asyncio
    async def test_trigger_during_cooldown_is_noop(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            return _ok(request)

        dispatcher, timer = _dispatcher(handler)
        dispatcher.trigger("first")
        await dispatcher.wait_for_completion()

        assert dispatcher.phase is DispatchPhase.COOLDOWN
        assert dispatcher.trigger("again") is False
        # 被忽略的触发不会重置冷却
        timer.tick()
        assert dispatcher.trigger("again") is False
        assert dispatcher.remaining_ms == 900
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_at_most_one_request_per_cycle(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            return _ok(request)

        dispatcher, timer = _dispatcher(handler)

        for _ in range(3):
            dispatcher.trigger("data")
        await dispatcher.wait_for_completion()

        while timer.is_active:
            assert dispatcher.trigger("data") is False
            timer.tick()

        assert dispatcher.phase is DispatchPhase.IDLE
        assert len(calls) == 1

        assert dispatcher.trigger("data") is True
        await dispatcher.wait_for_completion()
        assert len(calls) == 2


class TestActionDispatcherLifecycle:
    @pytest.mark.asyncio
    async def test_all_candidates_fail_then_cooldown(self) -> None:
        """全部候选传输失败：Busy 持续到最后一次尝试，之后进入 Cooldown"""
        phases_during_attempts: list[DispatchPhase] = []
        dispatcher: ActionDispatcher

        def handler(request: httpx.Request) -> httpx.Response:
            phases_during_attempts.append(dispatcher.phase)
            raise httpx.ConnectError("refused", request=request)

        dispatcher, _ = _dispatcher(handler)
        dispatcher.trigger("data")
        outcome = await dispatcher.wait_for_completion()

        assert isinstance(outcome, RequestFailure)
        assert [a.candidate for a in outcome.attempts] == CANDIDATES
        assert phases_during_attempts == [DispatchPhase.BUSY] * 3
        assert dispatcher.state == DispatchState.cooldown(1000)

    @pytest.mark.asyncio
    async def test_cooldown_decays_to_idle(self) -> None:
        dispatcher, timer = _dispatcher(_ok)
        states: list[DispatchState] = []
        dispatcher.subscribe(states.append)

        dispatcher.trigger("data")
        await dispatcher.wait_for_completion()
        for _ in range(10):
            timer.tick()

        assert states[0] == DispatchState.busy()
        assert states[1] == DispatchState.cooldown(1000)
        assert states[2] == DispatchState.cooldown(900)
        assert states[-2] == DispatchState.cooldown(100)
        assert states[-1] == DispatchState.idle()
        assert DispatchState.cooldown(0) not in states

    @pytest.mark.asyncio
    async def test_remaining_seconds_rounds_up(self) -> None:
        dispatcher, timer = _dispatcher(_ok)
        dispatcher.trigger("data")
        await dispatcher.wait_for_completion()

        assert dispatcher.state.remaining_seconds == 1
        for _ in range(9):
            timer.tick()
        assert dispatcher.remaining_ms == 100
        assert dispatcher.state.remaining_seconds == 1

    @pytest.mark.asyncio
    async def test_unexpected_client_error_still_enters_cooldown(self) -> None:
        client = AsyncMock(spec=ResilientRequestClient)
        client.send.side_effect = RuntimeError("kaboom")
        timer = CooldownTimer(100, auto_tick=False)
        dispatcher = ActionDispatcher(
            client, COOLDOWN, timer=timer, candidate_provider=lambda: CANDIDATES
        )

        dispatcher.trigger("data")
        outcome = await dispatcher.wait_for_completion()

        assert isinstance(outcome, RequestFailure)
        assert "kaboom" in (outcome.message or "")
        assert dispatcher.phase is DispatchPhase.COOLDOWN
        assert timer.is_active

    @pytest.mark.asyncio
    async def test_outcome_callback_receives_result(self) -> None:
        on_outcome = AsyncMock()
        dispatcher, _ = _dispatcher(_ok, on_outcome=on_outcome)

        dispatcher.trigger("data")
        await dispatcher.wait_for_completion()

        assert on_outcome.await_count == 1
        outcome = on_outcome.await_args.args[0]
        assert isinstance(outcome, RequestSuccess)
        assert outcome.candidate == "http://a.test"

    @pytest.mark.asyncio
    async def test_failing_callbacks_do_not_break_dispatcher(self) -> None:
        def bad_outcome(_outcome) -> None:
            raise ValueError("ui error")

        def bad_listener(_state) -> None:
            raise ValueError("listener error")

        dispatcher, _ = _dispatcher(_ok, on_outcome=bad_outcome)
        dispatcher.subscribe(bad_listener)

        dispatcher.trigger("data")
        await dispatcher.wait_for_completion()

        assert dispatcher.phase is DispatchPhase.COOLDOWN

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self) -> None:
        dispatcher, _ = _dispatcher(_ok)
        states: list[DispatchState] = []
        unsubscribe = dispatcher.subscribe(states.append)
        unsubscribe()

        dispatcher.trigger("data")
        await dispatcher.wait_for_completion()

        assert states == []

    @pytest.mark.asyncio
    async def test_uses_page_origin_candidates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DRAWING_API_ORIGIN", "http://override.test")
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            if request.url.host == "override.test":
                raise httpx.ConnectError("down", request=request)
            return _ok(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = ResilientRequestClient("image", http_client=http_client)
        dispatcher = ActionDispatcher(
            client,
            COOLDOWN,
            page_origin=PageOrigin("https", "airdraw.test"),
            timer=CooldownTimer(100, auto_tick=False),
        )

        dispatcher.trigger("data")
        outcome = await dispatcher.wait_for_completion()

        assert isinstance(outcome, RequestSuccess)
        assert outcome.candidate == "https://airdraw.test"
        assert hosts == ["override.test", "airdraw.test"]

    @pytest.mark.asyncio
    async def test_real_timer_returns_to_idle(self) -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(_ok))
        client = ResilientRequestClient("image", http_client=http_client)
        dispatcher = ActionDispatcher(
            client,
            CooldownConfig(duration_ms=50, tick_interval_ms=10),
            candidate_provider=lambda: CANDIDATES,
        )
        idle = asyncio.Event()
        dispatcher.subscribe(lambda state: idle.set() if state.is_idle else None)

        dispatcher.trigger("data")
        await asyncio.wait_for(idle.wait(), timeout=2)

        assert dispatcher.phase is DispatchPhase.IDLE
        assert dispatcher.trigger("data") is True
        await dispatcher.close()

    @pytest.mark.asyncio
    async def test_close_cancels_in_flight_request(self) -> None:
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(10)
            return _ok(request)

        dispatcher, timer = _dispatcher(handler)
        dispatcher.trigger("data")
        await started.wait()

        await dispatcher.close()

        assert dispatcher.phase is DispatchPhase.IDLE
        assert not timer.is_active
