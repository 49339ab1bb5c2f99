"""
调度状态的展示文案

把 DispatchState / RequestOutcome 转换成按钮文案、等待提示和用户可读的结果消息。
原始的候选端点尝试日志只写入日志，不会出现在这里的任何文案中。
"""

from __future__ import annotations

from dataclasses import dataclass

from src.models.drawing import DrawingMode
from src.services.dispatch.models import DispatchPhase, DispatchState
from src.services.endpoint.models import RequestOutcome

LABEL_BUSY = "ENHANCING..."
LABEL_IDLE = "ENHANCE DRAWING"

MESSAGE_ENHANCED = "Your drawing has been enhanced!"
MESSAGE_FAILED = "Sorry, I had trouble seeing your masterpiece. Please check your connection."


@dataclass(frozen=True)
class ButtonView:
    label: str
    disabled: bool


def describe_button(state: DispatchState) -> ButtonView:
    if state.phase is DispatchPhase.BUSY:
        return ButtonView(LABEL_BUSY, disabled=True)
    if state.phase is DispatchPhase.COOLDOWN:
        return ButtonView(f"WAIT {state.remaining_seconds}s", disabled=True)
    return ButtonView(LABEL_IDLE, disabled=False)


def wait_hint(state: DispatchState) -> str | None:
    """被门控时的 "请稍候" 提示"""
    if state.phase is DispatchPhase.BUSY:
        return "Please wait, still working on the last drawing"
    if state.phase is DispatchPhase.COOLDOWN:
        return f"Please wait {state.remaining_seconds}s"
    return None


def describe_outcome(outcome: RequestOutcome, mode: DrawingMode = DrawingMode.ENHANCE) -> str:
    if not outcome.ok:
        return MESSAGE_FAILED
    if mode is DrawingMode.ANALYZE:
        return outcome.value.strip()
    return MESSAGE_ENHANCED
