"""
动作调度模块

- ActionDispatcher: 冷却门控的动作调度器
- CooldownTimer: 冷却倒计时
- BusyFeedbackController: 请求中动画
- presenter: 按钮文案 / 等待提示 / 结果消息
"""

from src.services.dispatch.cooldown import CooldownTimer
from src.services.dispatch.dispatcher import ActionDispatcher
from src.services.dispatch.feedback import BusyFeedbackController, IndicatorState
from src.services.dispatch.models import CooldownConfig, DispatchPhase, DispatchState
from src.services.dispatch.presenter import (
    ButtonView,
    describe_button,
    describe_outcome,
    wait_hint,
)

__all__ = [
    "ActionDispatcher",
    "BusyFeedbackController",
    "ButtonView",
    "CooldownConfig",
    "CooldownTimer",
    "DispatchPhase",
    "DispatchState",
    "IndicatorState",
    "describe_button",
    "describe_outcome",
    "wait_hint",
]
