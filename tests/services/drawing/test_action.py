"""
绘图动作装配测试（含调度器 -> 绘图端点的端到端流程）
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.api.public.drawing import get_drawing_service
from src.config import config
from src.main import create_app
from src.models.drawing import DrawingMode, EnhanceResponse
from src.services.dispatch import DispatchPhase
from src.services.drawing import create_drawing_client, create_drawing_dispatcher
from src.services.endpoint import PageOrigin, RequestSuccess


class TestCreateDrawingClient:
    def test_response_field_follows_mode(self) -> None:
        assert create_drawing_client(DrawingMode.ENHANCE).response_field == "image"
        assert create_drawing_client(DrawingMode.ANALYZE).response_field == "result"

    def test_configured_field_overrides_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "drawing_response_field", "enhancedImage")
        assert create_drawing_client(DrawingMode.ENHANCE).response_field == "enhancedImage"

    def test_timeout_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "drawing_request_timeout", 15.0)
        assert create_drawing_client(DrawingMode.ENHANCE).timeout == 15.0


class TestCreateDrawingDispatcher:
    def test_cooldown_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "cooldown_ms", 3000)
        monkeypatch.setattr(config, "cooldown_tick_ms", 250)

        dispatcher = create_drawing_dispatcher(PageOrigin("http", "localhost", 5173))

        assert dispatcher.cooldown.duration_ms == 3000
        assert dispatcher.cooldown.tick_interval_ms == 250
        assert dispatcher.phase is DispatchPhase.IDLE

    @pytest.mark.asyncio
    async def test_end_to_end_against_drawing_endpoint(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("DRAWING_API_ORIGIN", raising=False)
        service = MagicMock()
        service.process = AsyncMock(return_value=EnhanceResponse(image="data:image/png;base64,SU1H"))
        app = create_app()
        app.dependency_overrides[get_drawing_service] = lambda: service

        http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        on_outcome = AsyncMock()
        dispatcher = create_drawing_dispatcher(
            PageOrigin("http", "localhost", 8888),
            on_outcome=on_outcome,
            mode=DrawingMode.ENHANCE,
            http_client=http_client,
        )

        assert dispatcher.trigger("data:image/png;base64,QUJD") is True
        outcome = await dispatcher.wait_for_completion()

        assert isinstance(outcome, RequestSuccess)
        assert outcome.candidate == "http://localhost:8888"
        assert outcome.value == "data:image/png;base64,SU1H"
        assert dispatcher.phase is DispatchPhase.COOLDOWN
        on_outcome.assert_awaited_once_with(outcome)

        await dispatcher.close()
        await http_client.aclose()
