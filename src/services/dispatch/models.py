"""
动作调度数据模型

- DispatchPhase: 调度阶段（空闲 / 请求中 / 冷却中）
- DispatchState: 当前状态快照，供展示层绑定
- CooldownConfig: 冷却配置（不可变）
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.config.constants import DispatchDefaults


class DispatchPhase(str, Enum):
    IDLE = "idle"
    BUSY = "busy"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class DispatchState:
    phase: DispatchPhase = DispatchPhase.IDLE
    remaining_ms: int = 0

    @classmethod
    def idle(cls) -> DispatchState:
        return cls(DispatchPhase.IDLE, 0)

    @classmethod
    def busy(cls) -> DispatchState:
        return cls(DispatchPhase.BUSY, 0)

    @classmethod
    def cooldown(cls, remaining_ms: int) -> DispatchState:
        return cls(DispatchPhase.COOLDOWN, remaining_ms)

    @property
    def remaining_seconds(self) -> int:
        """剩余冷却秒数（向上取整）"""
        if self.remaining_ms <= 0:
            return 0
        return math.ceil(self.remaining_ms / 1000)

    @property
    def is_idle(self) -> bool:
        return self.phase is DispatchPhase.IDLE


class CooldownConfig(BaseModel):
    """冷却配置，要求 0 < tick_interval_ms <= duration_ms"""

    model_config = ConfigDict(frozen=True)

    duration_ms: int = Field(default=DispatchDefaults.COOLDOWN_MS, gt=0)
    tick_interval_ms: int = Field(default=DispatchDefaults.TICK_INTERVAL_MS, gt=0)

    @model_validator(mode="after")
    def _check_tick_interval(self) -> CooldownConfig:
        if self.tick_interval_ms > self.duration_ms:
            raise ValueError("tick_interval_ms 不能大于 duration_ms")
        return self
