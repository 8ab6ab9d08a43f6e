from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from .backends.protocol import LoginSurface
from .config import LoginConfig
from .log import ComponentLogger, get_logger
from .models import Account
from .prompt import ManualInputChannel, NoManualInput

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class TraceEmitter(Protocol):
    def emit(self, event_type: str, data: dict, step_id: str | None = None) -> None: ...


@dataclass
class LoginContext:
    """
    Explicit dependencies for one sign-in run.

    Handed to every detector, handler and sub-flow instead of a shared bot
    object; nothing here outlives the run.
    """

    surface: LoginSurface
    account: Account
    config: LoginConfig = field(default_factory=LoginConfig)
    manual_input: ManualInputChannel = field(default_factory=NoManualInput)
    is_mobile: bool = False
    sleep: SleepFn = asyncio.sleep
    tracer: Optional[TraceEmitter] = None

    def logger(self, name: str, component: str) -> ComponentLogger:
        return get_logger(name, component, is_mobile=self.is_mobile)

    async def wait(self, seconds: float) -> None:
        if seconds > 0:
            await self.sleep(seconds)

    async def settle(self, timeout_ms: int | None = None) -> bool:
        return await self.surface.wait_settle(timeout_ms or self.config.settle_timeout_ms)

    async def probe(self, signal_id: str, timeout_ms: int | None = None) -> bool:
        return await self.surface.probe(signal_id, timeout_ms or self.config.probe_timeout_ms)

    def emit(self, event_type: str, data: dict[str, Any], step_id: str | None = None) -> None:
        if self.tracer is None:
            return
        try:
            self.tracer.emit(event_type, data, step_id=step_id)
        except Exception as e:
            # Tracing is observational only.
            logger.debug(f"trace emit failed: {e}")
